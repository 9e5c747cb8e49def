"""
Gateway Planner Business Logic Services

This package contains the sizing and assignment engine and the planning
service built on top of it.
"""

from .planner import GatewayPlanningService, get_planning_service
from .planning_logger import (
    JsonLogFormatter,
    PlanningLogger,
    StageMetrics,
    build_log_formatter,
    configure_planning_logging,
)

__all__ = [
    # Planning
    "GatewayPlanningService",
    "get_planning_service",
    # Logging
    "JsonLogFormatter",
    "PlanningLogger",
    "StageMetrics",
    "build_log_formatter",
    "configure_planning_logging",
]
