class OctoError(Exception):
    """Base exception for octo."""


class ClientException(OctoError):
    pass


class HTTPException(OctoError):
    def __init__(self, status, message, data=None):
        super().__init__(f"HTTP {status}: {message}")
        self.status = status
        self.data = data


class Forbidden(HTTPException):
    pass


class NotFound(HTTPException):
    pass


class LoginFailure(ClientException):
    pass
