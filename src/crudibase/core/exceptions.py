"""
Custom exceptions for Crudibase.
"""


class CrudibaseError(Exception):
    """Base exception for all Crudibase errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ValidationError(CrudibaseError):
    """Raised when caller input fails validation."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason


class InvalidEntityIdError(ValidationError):
    """Raised when an entity id does not look like ``Q123`` or ``P123``.

    Callers exposing the lookup over HTTP should map this to a 400-class
    response.
    """

    def __init__(self, entity_id: str, prefixes: str = "QP"):
        super().__init__(
            "entity_id",
            entity_id,
            f"expected one of [{prefixes}] followed by digits",
        )
        # Kept as the primary message so callers can match on it.
        self.message = "Invalid entity ID format"
        self.args = (self.message,)
        self.entity_id = entity_id


class CacheError(CrudibaseError):
    """Raised when a cache operation fails."""

    def __init__(self, operation: str, details: str | None = None):
        super().__init__(f"Cache error during {operation}", details=details)
        self.operation = operation
