"""
LinkTree Core: Exception Hierarchy.

Every error raised by the builder or the shipped metadata sources derives from
LinkTreeError and carries an ErrorCode next to its message.
"""
import errno
from typing import Optional

from linktree.core.constants import ErrorCode


class LinkTreeError(Exception):
    """Base exception for LinkTree errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        """Initialize LinkTreeError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(LinkTreeError):
    """Invalid or contradictory builder options."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(message, error_code)


class MissingMetadataSourceError(LinkTreeError):
    """Metadata was requested but no metadata getter is configured."""

    def __init__(self, message: str = "no metadata getter supplied"):
        super().__init__(message, ErrorCode.DEPENDENCY_ERROR)


class MetadataRetrievalError(LinkTreeError):
    """A metadata source could not produce metadata for a file."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INVALID_INPUT,
    ):
        self.path = path
        super().__init__(message, error_code)


class LinkCreationError(LinkTreeError):
    """Creating a destination directory or link failed at the OS level.

    Attributes:
        destination: Path of the link (or directory) that could not be created
        source: Absolute path of the file the link should point to
        os_error: Text of the underlying OS error
    """

    def __init__(self, destination: str, source: str, os_error: OSError):
        self.destination = destination
        self.source = source
        self.os_error = os_error.strerror or str(os_error)
        message = f"couldn't create link <{destination}> to <{source}>: {self.os_error}"
        super().__init__(message, _error_code_for(os_error))


def _error_code_for(exc: OSError) -> ErrorCode:
    if exc.errno == errno.EEXIST:
        return ErrorCode.CONFLICT
    if exc.errno in (errno.EACCES, errno.EPERM):
        return ErrorCode.PERMISSION_DENIED
    if exc.errno == errno.ENOENT:
        return ErrorCode.NOT_FOUND
    return ErrorCode.INTERNAL_ERROR
