"""
Error taxonomy for the items service.

Every error raised while handling a request maps to an HTTP status code and is
rendered by the item handler as ``{"error": <message>}``.
"""

from http import HTTPStatus


class ItemServiceError(Exception):
    """Base class for errors that carry an HTTP status."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ItemServiceError):
    status_code = HTTPStatus.NOT_FOUND

    def __init__(self, message: str = "Item not found") -> None:
        super().__init__(message)


class MissingIdentifierError(ItemServiceError):
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str = "Missing item ID") -> None:
        super().__init__(message)


class UnsupportedMethodError(ItemServiceError):
    status_code = HTTPStatus.METHOD_NOT_ALLOWED

    def __init__(self, method: str | None) -> None:
        super().__init__(f'Unsupported method: "{method or ""}"')
        self.method = method


class AlreadyExistsError(ItemServiceError):
    """A create collided with an existing key. Not something the caller can fix."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, key: str) -> None:
        super().__init__(f"Item with id {key} already exists")
        self.key = key


class ValidationError(ItemServiceError):
    status_code = HTTPStatus.BAD_REQUEST


class StoreUnavailableError(ItemServiceError):
    """The backing store could not be reached or rejected the call."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class ConditionFailedError(Exception):
    """A conditional write was rejected because the key existence check failed."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Condition check failed for item {key}")
        self.key = key
