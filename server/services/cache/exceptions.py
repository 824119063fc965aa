"""Cache service exception hierarchy.

A read miss is not an exception: read methods return ``None``.
"""


class CacheError(Exception):
    """Base exception for all cache-related errors."""


class ValidationError(CacheError):
    """A key or record was rejected before reaching the database."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class PersistenceUnavailable(CacheError):
    """The database could not be reached or did not answer in time."""

    def __init__(self, kind: str, operation: str, reason: str):
        self.kind = kind
        self.operation = operation
        self.reason = reason
        super().__init__(f"[{kind}] {operation} failed: {reason}")


class ConstraintViolation(CacheError):
    """A write broke a uniqueness constraint outside of replace semantics.

    Under correct key normalization this points at a normalizer bug.
    """

    def __init__(self, kind: str, key: str, reason: str):
        self.kind = kind
        self.key = key
        self.reason = reason
        super().__init__(f"[{kind}] constraint violated for '{key}': {reason}")
