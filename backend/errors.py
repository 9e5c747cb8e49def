# backend/errors.py
"""
Gateway Planner Exception Hierarchy

Custom exceptions for the planning pipeline with recovery hints.

Capacity rejections are not exceptions: a placement that does not fit is a
normal boolean result, and streams that cannot be placed are reported on the
session. The errors below cover caller mistakes and invalid input.
"""

from typing import Any, Dict, Optional


class GatewayPlannerError(Exception):
    """Base exception for all Gateway Planner errors"""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
        }
        if self.details:
            result["details"] = self.details
        if self.recovery_hint:
            result["recoveryHint"] = self.recovery_hint
        return result


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ValidationError(GatewayPlannerError):
    """Input validation failed"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"field": field, "value": value, **(details or {})},
            recoverable=True,
            recovery_hint="Check input values and try again"
        )
        self.field = field


class InvalidCameraError(ValidationError):
    """Camera definition violates a form constraint"""

    def __init__(self, camera_name: str, field: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid camera '{camera_name}': {reason}",
            field=field,
            value=value,
            details={"camera": camera_name},
        )
        self.recovery_hint = "Edit the camera definition and recalculate"


# =============================================================================
# PLANNING ERRORS
# =============================================================================

class PlanningError(GatewayPlannerError):
    """Base exception for planning pipeline errors"""

    def __init__(
        self,
        message: str,
        stage: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
        recovery_hint: Optional[str] = None
    ):
        super().__init__(message, details, recoverable, recovery_hint)
        self.stage = stage

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["stage"] = self.stage
        return result


class UnknownGatewayTypeError(PlanningError):
    """Gateway type is not in the catalog"""

    def __init__(self, gateway_type: str, known_types: Optional[list] = None):
        super().__init__(
            message=f"Unknown gateway type: {gateway_type}",
            stage="recommendation",
            details={"gatewayType": gateway_type, "knownTypes": known_types or []},
            recovery_hint="Pick one of the catalog gateway types"
        )
        self.gateway_type = gateway_type


class ConfigurationUnderflowError(PlanningError):
    """Selected gateway count is below the computed minimum"""

    def __init__(self, gateway_type: str, count: int, minimum_count: int):
        super().__init__(
            message=(
                f"{count} x {gateway_type} gateway(s) cannot carry the load; "
                f"at least {minimum_count} required"
            ),
            stage="recommendation",
            details={
                "gatewayType": gateway_type,
                "count": count,
                "minimumCount": minimum_count,
            },
            recovery_hint="Increase the gateway count or choose a larger gateway type"
        )
        self.count = count
        self.minimum_count = minimum_count


class UnknownStreamError(PlanningError):
    """Stream id does not belong to the session"""

    def __init__(self, stream_id: str):
        super().__init__(
            message=f"Unknown stream: {stream_id}",
            stage="assignment",
            details={"streamId": stream_id},
        )
        self.stream_id = stream_id


class UnknownGatewayError(PlanningError):
    """Gateway instance id does not exist in the session"""

    def __init__(self, gateway_id: str, count: int):
        super().__init__(
            message=f"Unknown gateway instance: {gateway_id}",
            stage="assignment",
            details={"gatewayId": gateway_id, "gatewayCount": count},
            recovery_hint=f"Gateway ids range from 0 to {count - 1}"
        )
        self.gateway_id = gateway_id


# =============================================================================
# SESSION ERRORS
# =============================================================================

class SessionNotFoundError(PlanningError):
    """Planning session does not exist or has expired"""

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Planning session not found: {session_id}",
            stage="session",
            details={"sessionId": session_id},
            recovery_hint="Start a new planning session from the camera list"
        )
        self.session_id = session_id


class SessionLimitError(PlanningError):
    """Too many live planning sessions"""

    def __init__(self, max_sessions: int):
        super().__init__(
            message=f"Session limit reached ({max_sessions})",
            stage="session",
            details={"maxSessions": max_sessions},
            recovery_hint="Discard unused sessions or try again later"
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(GatewayPlannerError):
    """Configuration error"""

    def __init__(
        self,
        message: str,
        setting: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            details={"setting": setting, **(details or {})},
            recoverable=False,
            recovery_hint="Check .env configuration file"
        )
