"""Error taxonomy shared by the services, the gateways and the HTTP layer.

Every error carries a human readable ``message`` and the HTTP status the API
answers with when it escapes a request handler.
"""

from fastapi import status


class EmpowerLinkError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EmpowerLinkError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(ValidationError):
    """A decision was attempted on a request already in a terminal status."""


class AuthenticationError(EmpowerLinkError):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(EmpowerLinkError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(EmpowerLinkError):
    status_code = status.HTTP_404_NOT_FOUND


class GatewayError(EmpowerLinkError):
    """The underlying record store or identity provider failed."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PermissionDeniedError(GatewayError):
    """Row-level permission check refused the operation."""

    status_code = status.HTTP_403_FORBIDDEN
