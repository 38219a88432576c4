class AuditError(Exception):
    """Base class for errors raised by a11yaudit."""


class UsageError(AuditError):
    """Bad or missing configuration. Fatal before any browser is launched."""


class ScanError(AuditError):
    """The accessibility engine failed or returned an unusable result."""
