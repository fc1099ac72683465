"""
Errors raised by the store operations themselves.

Failures coming from the underlying store (e.g. `sqlalchemy.exc.SQLAlchemyError`)
are never wrapped; they reach the caller unchanged.
"""


class PersistenceError(Exception):
    """Base class for errors raised by this library."""

    pass


class ConfigurationError(PersistenceError):
    """Raised before any store call when an operation is invoked with invalid arguments."""

    pass


class InvalidFieldDescriptor(ConfigurationError):
    """Raised when a field descriptor does not reference a settable boolean field."""

    def __init__(self, descriptor, reason: str):
        self.descriptor = descriptor
        self.reason = reason
        super().__init__(f"Invalid field descriptor {descriptor!r}: {reason}")


class InvalidPageRequest(ConfigurationError):
    """Raised for a non-positive page number or an out-of-range page size."""

    def __init__(self, field_name: str, value, message: str):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Invalid {field_name}={value!r}: {message}")


class OperationCancelled(PersistenceError):
    """Raised when the caller's cancel event is set between two store calls."""

    pass
