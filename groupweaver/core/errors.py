"""
Error types raised by the grouping engine and its configuration layer.
"""

from typing import Any, Dict, Optional


class ApiError(Exception):
    """Error carrying an HTTP-style status and a stable machine-readable code."""

    def __init__(self, status: int, message: str, code: str,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.status} {self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(ApiError):
    """Raised when a settings file or environment override cannot be used."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(500, message, "INVALID_CONFIGURATION", details)


class ErrorFactory:
    """Builders for the errors the engine can raise."""

    @staticmethod
    def unknown_strategy(strategy: Any) -> ApiError:
        return ApiError(
            400,
            f"Unknown grouping strategy: {strategy}",
            "UNKNOWN_GROUPING_STRATEGY",
            {"strategy": strategy},
        )

    @staticmethod
    def invalid_param(param: str, expected: str, received: Any = None) -> ApiError:
        message = f"Invalid parameter '{param}': expected {expected}"
        if received is not None:
            message += f", got {received!r}"
        return ApiError(
            400,
            message,
            "INVALID_PARAMETER",
            {"param": param, "expected": expected, "received": received},
        )
