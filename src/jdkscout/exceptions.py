"""jdkscout exception hierarchy.

All public exceptions inherit from JdkScoutError, giving callers a single
base class to catch when they want to handle any jdkscout-specific failure
without swallowing unrelated errors.

Directory-level probe failures are deliberately absent from this module:
a directory that is not a valid JDK is reported as "not found", never
raised.
"""


class JdkScoutError(Exception):
    """Base exception for all jdkscout errors."""


class InvalidInputError(JdkScoutError, TypeError):
    """Raised when detection is requested with malformed input.

    Covers a ``paths`` value that is neither a string nor a list, and
    lists containing non-string elements. Always raised before any
    directory is probed.
    """


class WatchError(JdkScoutError):
    """Raised when a filesystem watch cannot be established.

    Fatal to the watch session that hit it: the session reports the
    error through its "error" channel and stops.
    """
