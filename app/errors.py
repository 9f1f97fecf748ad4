# app/errors.py

class SubscriberError(Exception):
    """Base class for subscription errors surfaced to the HTTP layer"""
    status_code = 500
    message = "Error en el servidor"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidEmail(SubscriberError):
    status_code = 400
    message = "Email inválido"


class Unauthorized(SubscriberError):
    status_code = 401
    message = "Unauthorized"


class StoreUnavailable(SubscriberError):
    """The backing store could not be read or written"""
    status_code = 500
    message = "Error en el servidor"
