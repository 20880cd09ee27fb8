# learnhub/core/exceptions.py


class LearnHubException(Exception):
    """Base class for errors raised by the service layer; carries the HTTP status to answer with."""
    status_code: int = 500

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(self.message)


class BadRequestError(LearnHubException):
    status_code = 400

    def __init__(self, message: str = "Bad request"):
        super().__init__(message)


class UnauthorizedError(LearnHubException):
    """Missing, expired or mismatched credentials."""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(LearnHubException):
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(LearnHubException):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class InternalError(LearnHubException):
    status_code = 500


class BadGatewayError(LearnHubException):
    """An upstream service (identity provider, code runner) failed or answered nonsense."""
    status_code = 502

    def __init__(self, message: str = "Bad gateway"):
        super().__init__(message)
