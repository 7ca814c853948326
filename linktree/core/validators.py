"""
LinkTree Core: Option Validators.

This module provides the validation functions applied to raw builder options
before any filesystem activity takes place. Each validator either returns the
normalized value or raises ConfigurationError naming the violated constraint.
"""
import os
from typing import Any, Dict, Iterable, Tuple, Union

from linktree.core.constants import BUILDER_OPTIONS, DEFAULT_LINK_ROOT, ConfigKey, OnExisting
from linktree.core.errors import ConfigurationError

PathLike = Union[str, os.PathLike]


def validate_option_keys(options: Dict[str, Any]) -> bool:
    """Reject option names the builder does not recognize.

    Args:
        options: Raw option mapping

    Returns:
        True if every key is known

    Raises:
        ConfigurationError: If unknown keys are present
    """
    if not isinstance(options, dict):
        raise ConfigurationError("Builder options must be a dictionary")

    unknown = set(options) - BUILDER_OPTIONS
    if unknown:
        raise ConfigurationError(f"Unknown builder options: {', '.join(sorted(unknown))}")

    return True


def normalize_storage_roots(options: Dict[str, Any]) -> Tuple[str, ...]:
    """Resolve storage_root / storage_roots into a tuple of paths.

    Exactly one of the two forms may be given. Either form accepts a single
    path or a list of paths.

    Args:
        options: Raw option mapping

    Returns:
        Tuple of storage root paths, in the order given

    Raises:
        ConfigurationError: If both forms are given or no root remains
    """
    single = options.get(ConfigKey.STORAGE_ROOT)
    multiple = options.get(ConfigKey.STORAGE_ROOTS)

    if single and multiple:
        raise ConfigurationError("only give storage_root or storage_roots, not both")

    raw = multiple if multiple else single

    if raw is None:
        roots: Iterable[Any] = ()
    elif isinstance(raw, (str, bytes, os.PathLike)):
        roots = (raw,)
    elif isinstance(raw, (list, tuple)):
        roots = raw
    else:
        raise ConfigurationError(
            f"Storage roots must be a path or a list of paths, got {type(raw).__name__}: {raw!r}"
        )

    normalized = []
    for root in roots:
        if not isinstance(root, (str, os.PathLike)) or not os.fspath(root):
            raise ConfigurationError(f"Invalid storage root: {root!r}")
        normalized.append(os.fspath(root))

    if not normalized:
        raise ConfigurationError("no file storage_root")

    return tuple(normalized)


def validate_link_root(value: Any) -> str:
    """Normalize the link root to a path string.

    Args:
        value: None, a string or a path-like object

    Returns:
        The link root as a string ("." when value is None or empty)

    Raises:
        ConfigurationError: If value is not a path
    """
    if value is None:
        return DEFAULT_LINK_ROOT

    if not isinstance(value, (str, os.PathLike)):
        # YAML and environment values such as 2024 arrive as numbers
        raise ConfigurationError(
            f"link_root must be a path, got {type(value).__name__}: {value!r}"
        )

    return os.fspath(value) or DEFAULT_LINK_ROOT


def validate_on_existing(value: Any) -> OnExisting:
    """Parse the on_existing policy.

    Args:
        value: None, an OnExisting member or its string value

    Returns:
        OnExisting policy (FAIL when value is None or empty)

    Raises:
        ConfigurationError: If value is not a known policy
    """
    if not value:
        return OnExisting.FAIL

    if isinstance(value, OnExisting):
        return value

    try:
        return OnExisting(value)
    except ValueError:
        valid = [p.value for p in OnExisting]
        raise ConfigurationError(f"invalid 'on_existing' argument: {value!r}. Must be one of {valid}")


def validate_link_paths(link_paths: Any) -> Tuple[Tuple[str, ...], ...]:
    """Validate link path templates.

    Args:
        link_paths: List of templates, each a list of metadata field names

    Returns:
        Templates as a tuple of tuples

    Raises:
        ConfigurationError: If a template is empty or holds a non-string field
    """
    if link_paths is None:
        return ()

    if not isinstance(link_paths, (list, tuple)):
        raise ConfigurationError("link_paths must be a list of field name lists")

    templates = []
    for i, template in enumerate(link_paths):
        if isinstance(template, str) or not isinstance(template, (list, tuple)):
            raise ConfigurationError(f"link path at index {i} must be a list of field names")
        if not template:
            raise ConfigurationError(f"link path at index {i} cannot be empty")
        for field_name in template:
            if not isinstance(field_name, str) or not field_name:
                raise ConfigurationError(
                    f"link path at index {i} has an invalid field name: {field_name!r}"
                )
        templates.append(tuple(template))

    return tuple(templates)


def validate_callable(name: str, value: Any) -> bool:
    """Check that an optional collaborator is callable.

    Args:
        name: Option name used in the error message
        value: Candidate collaborator

    Returns:
        True if value is None or callable

    Raises:
        ConfigurationError: If value is set but not callable
    """
    if value is not None and not callable(value):
        raise ConfigurationError(f"{name} must be callable, got {type(value).__name__}")
    return True
