"""Error types raised by the framework.

Services and builders raise these; the handler layer and the app's
exception handlers translate them into HTTP responses.
"""

from fastapi import status


class MddRestError(Exception):
    """Base class for framework errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(MddRestError):
    """The requested resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class BadRequestError(MddRestError):
    """The request is malformed or refers to unknown members."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidRelationshipError(BadRequestError):
    """A relationship name is unknown or not exposed as a sub-resource."""

    def __init__(self, relation_name: str) -> None:
        super().__init__(f"Invalid relationship: {relation_name}")
        self.relation_name = relation_name


class RsqlSyntaxError(BadRequestError):
    """An RSQL filter could not be parsed."""

    def __init__(self, message: str, query: str, position: int) -> None:
        super().__init__(f"{message} at position {position} in filter: {query!r}")
        self.query = query
        self.position = position


class ModelRegistrationError(MddRestError):
    """A model class cannot be registered as a REST resource."""
