"""
Domain error taxonomy.

Services raise these; the handlers registered in ``fundflow.main`` turn them
into ``{"message": ..., "error": <kind>}`` JSON bodies with the matching
HTTP status.
"""


class FundflowError(Exception):
    """Base class for errors reported to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationError(FundflowError):
    """Malformed or missing input"""
    status_code = 400


class AuthenticationError(FundflowError):
    """Bad or missing credentials"""
    status_code = 401


class AuthorizationError(FundflowError):
    """Wrong role, not the owner, or deactivated account"""
    status_code = 403


class NotFoundError(FundflowError):
    """Referenced entity absent or not publicly visible"""
    status_code = 404


class ConflictError(FundflowError):
    """Duplicate value for a unique field"""
    status_code = 409


class UpstreamError(FundflowError):
    """Payment or email provider failure"""
    status_code = 502


class InternalError(FundflowError):
    status_code = 500
