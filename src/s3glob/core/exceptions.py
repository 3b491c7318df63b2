"""Exception hierarchy for s3glob."""


class S3GlobError(Exception):
    """Base exception for all s3glob errors."""

    pass


class ValidationError(S3GlobError):
    """Raised when patterns, options or the listing client fail validation."""

    pass


class FormatError(S3GlobError):
    """Raised when an entry is processed with an unknown output format."""

    pass
