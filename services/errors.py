"""
Expected, recoverable outcomes of engine operations.

Each error carries the HTTP status the API boundary answers with and a
human-readable message. Routes never build error payloads by hand: the
handler registered in ``app.py`` turns any ``ServiceError`` into
``{"success": false, "error": <kind>, "message": ...}``.
"""


class ServiceError(Exception):
    status_code = 400
    default_message = "Request could not be completed"

    def __init__(self, message=None, **details):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        payload = {"success": False, "error": self.kind, "message": self.message}
        if self.details:
            payload.update(self.details)
        return payload


class Unauthorized(ServiceError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class InvalidInput(ServiceError):
    status_code = 400
    default_message = "Invalid data"


class InvalidRange(InvalidInput):
    default_message = "start must be before end"


class InvalidReason(InvalidInput):
    default_message = "Provide a valid reason"


class SlotUnavailable(ServiceError):
    status_code = 409
    default_message = "This time slot is no longer available"


class InvalidState(ServiceError):
    status_code = 409
    default_message = "Operation not allowed for the current status"
