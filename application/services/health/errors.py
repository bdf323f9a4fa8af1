from __future__ import annotations

from typing import Any, Dict, Optional


class HealthRequestError(Exception):
    code = "invalid_request"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidParametersError(HealthRequestError):
    code = "invalid_parameters"


class PortNotAllowedError(HealthRequestError):
    code = "invalid_port"


class HostNotAllowedError(HealthRequestError):
    code = "host_not_allowed"
