"""
Custom exceptions for the tracker.

Exception Hierarchy:
    TrackerError (base)
    ├── RecordValidationError (missing or malformed field)
    ├── DuplicateKeyError (unique constraint violation)
    ├── RecordNotFoundError (operation on a nonexistent id)
    ├── InvalidCredentialsError (login failure)
    ├── StorageError (any lower-level database failure)
    └── DeliveryError (mail transport failure)

The API layer maps each subclass to an HTTP status and error code; the
reminder job only logs DeliveryError.

Example:
    >>> from tasktrack.core.exceptions import RecordNotFoundError
    >>> try:
    ...     raise RecordNotFoundError("project", "p-1")
    ... except RecordNotFoundError as e:
    ...     print(e)
    Project not found: p-1
"""


class TrackerError(Exception):
    """
    Base exception for all tracker errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class RecordValidationError(TrackerError):
    """
    Raised when a required field is missing or a value is not allowed.

    Attributes:
        field: Name of the offending field, if known
    """

    def __init__(self, message: str, field: str | None = None, **context: object) -> None:
        super().__init__(message, **context)
        self.field = field


class DuplicateKeyError(TrackerError):
    """
    Raised when a write would violate a unique constraint.

    Attributes:
        entity: Entity kind ("user", "project", "task")
        field: Column that must be unique
    """

    def __init__(self, entity: str, field: str, message: str | None = None) -> None:
        super().__init__(message or f"{entity.capitalize()} {field} already exists")
        self.entity = entity
        self.field = field


class RecordNotFoundError(TrackerError):
    """
    Raised when reading, updating or deleting an id that does not exist.

    Attributes:
        entity: Entity kind ("user", "project", "task")
        record_id: The id that was looked up
    """

    def __init__(self, entity: str, record_id: str) -> None:
        super().__init__(f"{entity.capitalize()} not found: {record_id}")
        self.entity = entity
        self.record_id = record_id


class InvalidCredentialsError(TrackerError):
    """
    Raised on login failure.

    The message is the same whether the email is unknown or the password is
    wrong.
    """

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class StorageError(TrackerError):
    """Raised when the database layer fails for a reason other than a constraint."""


class DeliveryError(TrackerError):
    """
    Raised by mail transports when a message cannot be delivered.

    Attributes:
        recipient: Address the message was addressed to
    """

    def __init__(self, message: str, recipient: str | None = None) -> None:
        super().__init__(message, recipient=recipient)
        self.recipient = recipient
