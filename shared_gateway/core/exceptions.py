"""
Custom exception classes.

Every failure aborts the whole reconciliation run; none are retried here.
"""


class SharedGatewayError(Exception):
    """Base exception class for shared gateway reconciliation."""

    pass


class ConfigurationError(SharedGatewayError):
    """Raised when the gateway configuration is missing or invalid."""

    pass


class AmbiguousMatchError(SharedGatewayError):
    """Raised when live state offers more than one candidate for a single match."""

    pass


class NotFoundError(SharedGatewayError):
    """Raised when a configured gateway or resource does not exist live."""

    pass


class UpstreamError(SharedGatewayError):
    """Raised when a call to the gateway administration API fails."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"API Gateway call {operation} failed: {cause}")


class PreconditionError(SharedGatewayError):
    """Raised when reconciliation steps are invoked out of order."""

    pass


class DanglingReferenceError(SharedGatewayError):
    """Raised when the reconciled template still references a removed node."""

    def __init__(self, key: str, target: str, detail: str = "references removed resource"):
        self.key = key
        self.target = target
        super().__init__(f"{key} {detail}: {target}")
