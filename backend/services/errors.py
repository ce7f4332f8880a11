"""Domain errors raised by the services and turned into HTTP answers by the app"""


class MediatorError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(MediatorError, LookupError):
    status_code = 404


class Forbidden(MediatorError, PermissionError):
    status_code = 403


class InvalidOperation(MediatorError, ValueError):
    status_code = 400


class Conflict(MediatorError, ValueError):
    # duplicate requests and friendships are answered as 400 with a message
    status_code = 400


class Unauthorized(MediatorError):
    status_code = 401
