"""Error taxonomy for the streamgate gateway."""

from typing import Any, Dict


class GatewayError(Exception):
    """Base class for gateway errors."""

    status_code = 500
    error_type = "proxy_error"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": {"message": str(self), "type": self.error_type}}


class ClientError(GatewayError):
    """Raised for requests rejected before streaming starts."""

    status_code = 400
    error_type = "invalid_request_error"


class InvalidPayload(ClientError):
    def __init__(self, message: str = "Invalid JSON"):
        super().__init__(message)


class MissingModel(ClientError):
    def __init__(self, message: str = "No model selected"):
        super().__init__(message)


class UnknownModel(ClientError):
    def __init__(self, model: str):
        super().__init__(f"Model not found: {model}")
        self.model = model


class UpstreamError(GatewayError):
    """
    Raised while relaying. The event-stream headers are already committed by
    then, so these only ever reach the logs.
    """

    error_type = "upstream_error"

    def __init__(self, endpoint: str, reason: str):
        super().__init__(f"{endpoint}: {reason}")
        self.endpoint = endpoint


class UpstreamUnreachable(UpstreamError):
    pass


class UpstreamReadError(UpstreamError):
    pass


class MethodNotAllowed(ClientError):
    status_code = 405

    def __init__(self, method: str):
        super().__init__(f"Method not allowed: {method}")
        self.method = method
