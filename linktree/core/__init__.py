"""LinkTree Core - Shared constants, errors and validators.

Import specific names from submodules:
    from linktree.core.constants import LinkMode, OnExisting
    from linktree.core.errors import ConfigurationError, LinkCreationError
    from linktree.core import validators
"""

from linktree.core import constants, errors, validators

__all__ = [
    "constants",
    "errors",
    "validators",
]
