"""Failures raised by the data-access layer and rendered at the API boundary."""


class ApiError(Exception):
    status_code = 500
    default_message = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "authentication required"


class Forbidden(ApiError):
    """The caller can see the entity but lacks the permission for this operation."""

    status_code = 403
    default_message = "forbidden"


class NotFoundInScope(ApiError):
    """
    The entity is absent or belongs to someone else.

    Both cases produce the same response so that ids of other users' records
    cannot be probed.
    """

    status_code = 404
    default_message = "not found"

    def __init__(self, entity: str = "entity") -> None:
        super().__init__(f"{entity} not found")


class ValidationFailure(ApiError):
    status_code = 400
    default_message = "invalid request"


class Conflict(ApiError):
    status_code = 409
    default_message = "conflict"
