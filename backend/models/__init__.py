"""
Gateway Planner Data Models

This package contains all data models for the planning pipeline.
Includes both planning dataclasses (engine values) and SQLAlchemy models (persistence).
"""

from .planning import (
    # Enums
    GatewayType,
    AssignmentState,

    # Camera models
    CameraDefinition,
    Stream,

    # Gateway models
    GatewayLimits,
    GatewayConfiguration,

    # Results
    Calculations,
    CapacityResult,
    ConfigurationCheck,
    AutoAssignReport,
)
from .orm import GatewayPlan

__all__ = [
    # Enums
    "GatewayType",
    "AssignmentState",

    # Camera models
    "CameraDefinition",
    "Stream",

    # Gateway models
    "GatewayLimits",
    "GatewayConfiguration",

    # Results
    "Calculations",
    "CapacityResult",
    "ConfigurationCheck",
    "AutoAssignReport",

    # ORM Models
    "GatewayPlan",
]
