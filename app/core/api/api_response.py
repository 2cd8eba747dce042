"""API response envelope

Every backend response is wrapped as `{success, data, timestamp, ...}`. Some
endpoints wrap `data` a second time (`{data: {data: ...}}`), an artifact of the
backend's own middleware. unwrap_envelope compensates for it by removing
exactly one level; a flat envelope passes through unchanged.

TODO: drop unwrap_envelope once the backend stops double-wrapping list and
detail responses.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.error.exceptions import ValidationFailedException

logger = logging.getLogger(__name__)

ENVELOPE_FIELDS = ("success", "data", "timestamp", "error", "statusCode", "details")


def unwrap_envelope(body: Dict[str, Any]) -> Dict[str, Any]:
    """Remove one level of `data` nesting, keeping the outer fields

    Args:
        body: Parsed response body

    Returns:
        Dict[str, Any]: Envelope with `data` replaced by the inner value when
        `body["data"]["data"]` exists, otherwise the body unchanged
    """
    data = body.get("data")
    if isinstance(data, dict) and data.get("data") is not None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Unwrapping double-nested response envelope")
        return {**body, "data": data["data"]}
    return body


@dataclass
class ApiResponse:
    """Backend response envelope"""
    success: bool
    data: Any = None
    timestamp: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    details: Optional[Any] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    http_status: Optional[int] = None

    @classmethod
    def from_body(cls, body: Dict[str, Any], http_status: Optional[int] = None) -> "ApiResponse":
        """Build an envelope from a parsed body, unwrapping one level"""
        body = unwrap_envelope(body)
        success = body.get("success")
        if success is None:
            # Bodies without the flag count as successful on a 2xx
            success = http_status is None or 200 <= http_status < 300
        return cls(
            success=bool(success),
            data=body.get("data"),
            timestamp=body.get("timestamp"),
            error=body.get("error"),
            status_code=body.get("statusCode"),
            details=body.get("details"),
            extra={k: v for k, v in body.items() if k not in ENVELOPE_FIELDS},
            http_status=http_status,
        )

    @property
    def message(self) -> str:
        """Best human-readable message carried by the envelope"""
        if isinstance(self.data, dict) and self.data.get("message"):
            return str(self.data["message"])
        if self.error:
            return str(self.error)
        if isinstance(self.details, str) and self.details:
            return self.details
        return ""

    def raise_for_failure(self, method: str = "", path: str = "") -> "ApiResponse":
        """Raise ValidationFailedException for a `success: false` envelope"""
        if not self.success:
            raise ValidationFailedException(
                self.message or "Request rejected by the server",
                method=method,
                path=path,
                status_code=self.http_status,
                response=self.to_dict(),
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Envelope as a plain dict using the backend's field names"""
        result = {**self.extra, "success": self.success, "data": self.data}
        if self.timestamp is not None:
            result["timestamp"] = self.timestamp
        if self.error is not None:
            result["error"] = self.error
        if self.status_code is not None:
            result["statusCode"] = self.status_code
        if self.details is not None:
            result["details"] = self.details
        return result
