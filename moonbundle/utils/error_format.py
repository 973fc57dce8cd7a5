"""Safe error message formatting utilities.

Ensures exceptions always have useful display messages, even when their str()
representation is empty, so a failed build never prints a bare
"Bundling failed: " line.
"""

from __future__ import annotations

from rich.markup import escape as _escape_markup

from ..errors import BundleError

# Friendly messages for exception types that may carry no message
FRIENDLY_MESSAGES: dict[type, str] = {
    FileNotFoundError: "A required file does not exist.",
    IsADirectoryError: "Expected a file but found a directory.",
    PermissionError: "Permission denied.",
    UnicodeDecodeError: "A source file is not valid text in the configured encoding.",
    KeyboardInterrupt: "Operation interrupted by user.",
}


def format_error_message(e: BaseException, *, include_type: bool | None = None) -> str:
    """Format an exception into a useful display message.

    Args:
        e: The exception to format
        include_type: Prefix the exception type name. By default the prefix is
            added for everything except BundleError, whose messages already
            name the problem.

    Returns:
        A non-empty, user-friendly error message

    Examples:
        >>> format_error_message(PermissionError())
        'PermissionError: Permission denied.'

        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'
    """
    if include_type is None:
        include_type = not isinstance(e, BundleError)

    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        if include_type and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    return f"{error_type}: {_friendly_message(e)}"


def _friendly_message(e: BaseException) -> str:
    # Most specific registered type wins, so subclasses can override a parent
    for exc_type in type(e).__mro__:
        if exc_type in FRIENDLY_MESSAGES:
            return FRIENDLY_MESSAGES[exc_type]
    return "(no additional details)"


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings.

    Module names and paths may contain brackets that Rich would otherwise
    read as markup tags.
    """
    return _escape_markup(str(value))
