"""
Plan export.

Builds the export document handed to the export/serialization layer and
keeps a history of exported plans in the database.
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from models import CameraDefinition, Calculations
from models.orm import GatewayPlan
from database import get_db_session
from services.assignment import AssignmentSession
from services.catalog import get_gateway_catalog
from config import get_settings

logger = logging.getLogger(__name__)


# =============================================================================
# FORMATTING
# =============================================================================

def format_storage(storage_tb: float) -> str:
    """Human-readable storage; values under one terabyte are shown in GB"""
    if storage_tb < 1:
        return f"{round(storage_tb * 1000, 1):g} GB"
    return f"{round(storage_tb, 1):g} TB"


def format_throughput(throughput: float) -> str:
    return f"{round(throughput)} MP/s"


def estimate_power_consumption(
    stream_count: int,
    base_watts: float = 45.0,
    per_stream_watts: float = 5.0,
) -> float:
    """Gateway power draw: base load plus a fixed amount per stream"""
    return base_watts + stream_count * per_stream_watts


def estimate_storage_cost(storage_tb: float, cost_per_tb: float = 150.0) -> float:
    """Storage cost, billed per started terabyte"""
    return math.ceil(storage_tb) * cost_per_tb


def gateway_label(gateway_type: str) -> str:
    catalog = get_gateway_catalog()
    if gateway_type in catalog and catalog.get(gateway_type).label:
        return catalog.get(gateway_type).label
    return gateway_type


# =============================================================================
# EXPORT DOCUMENT
# =============================================================================

def build_export_document(
    cameras: Sequence[CameraDefinition],
    calculations: Calculations,
    session: AssignmentSession,
    exported_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Serialize a finished (or partial) plan.

    Args:
        cameras: Camera list the streams were derived from
        calculations: Aggregated demand
        session: Assignment session to export

    Returns:
        JSON-ready dict with cameras, totals, configuration and assignments
    """
    settings = get_settings()
    exported_at = exported_at or datetime.utcnow()
    config = session.configuration
    label = gateway_label(config.type)

    gateways = []
    total_power = 0.0
    for gateway_id in session.gateway_ids:
        placed = session.streams_on(gateway_id)
        power = estimate_power_consumption(
            len(placed),
            base_watts=settings.power_base_watts,
            per_stream_watts=settings.power_per_stream_watts,
        )
        total_power += power
        gateways.append({
            "id": gateway_id,
            "streams": [s.to_dict() for s in placed],
            "capacity": session.capacity(gateway_id).to_dict(),
            "estimatedPowerWatts": power,
        })

    plural = "s" if config.count > 1 else ""
    return {
        "cameras": [c.to_dict() for c in cameras],
        "calculations": calculations.to_dict(),
        "gatewayConfig": config.to_dict(),
        "assignments": {
            gateway_id: [s.id for s in session.streams_on(gateway_id)]
            for gateway_id in session.gateway_ids
        },
        "gateways": gateways,
        "unassigned": [s.id for s in session.unassigned_streams()],
        "complete": session.is_complete(),
        "summary": {
            "totalCameras": len(cameras),
            "gatewayLabel": f"{config.count} x {label} Gateway{plural}",
            "formattedStorage": format_storage(calculations.total_storage),
            "formattedThroughput": format_throughput(calculations.total_throughput),
            "estimatedPowerWatts": total_power,
            "estimatedStorageCost": estimate_storage_cost(
                calculations.total_storage, settings.storage_cost_per_tb
            ),
        },
        "exportedAt": exported_at.isoformat() + "Z",
    }


# =============================================================================
# PLAN HISTORY
# =============================================================================

class PlanExportService:
    """Persists exported plans and serves the plan history"""

    def persist(self, session_id: str, document: Dict[str, Any]) -> Optional[int]:
        """
        Store an export document.

        Returns:
            Plan ID if persisted, None if the database write failed
        """
        try:
            calculations = document["calculations"]
            config = document["gatewayConfig"]
            with get_db_session() as db:
                plan = GatewayPlan(
                    session_id=session_id,
                    gateway_type=config["type"],
                    gateway_count=config["count"],
                    total_streams=calculations["totalStreams"],
                    total_throughput=calculations["totalThroughput"],
                    total_storage=calculations["totalStorage"],
                    complete=document["complete"],
                    document=document,
                )
                db.add(plan)
                db.flush()
                plan_id = plan.id
                logger.info(f"Persisted gateway plan {plan_id} for session {session_id}")
                return plan_id

        except Exception as e:
            logger.warning(f"Failed to persist gateway plan: {e}")
            return None

    def get_history(
        self,
        session_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """
        Get exported plans, newest first.

        Args:
            session_id: Filter by planning session
            limit: Max results
            offset: Pagination offset
        """
        try:
            with get_db_session() as db:
                query = db.query(GatewayPlan)
                if session_id:
                    query = query.filter(GatewayPlan.session_id == session_id)
                query = query.order_by(GatewayPlan.created_at.desc(), GatewayPlan.id.desc())
                plans = query.offset(offset).limit(limit).all()
                return [plan.to_dict() for plan in plans]

        except Exception as e:
            logger.error(f"Failed to get gateway plan history: {e}")
            return []

    def get_plan(self, plan_id: int) -> Optional[Dict[str, Any]]:
        try:
            with get_db_session() as db:
                plan = db.query(GatewayPlan).filter(GatewayPlan.id == plan_id).first()
                if plan:
                    return plan.to_dict(include_document=True)
                return None

        except Exception as e:
            logger.error(f"Failed to get gateway plan {plan_id}: {e}")
            return None


_plan_export_service: Optional[PlanExportService] = None


def get_plan_export_service() -> PlanExportService:
    """Get or create plan export service singleton"""
    global _plan_export_service
    if _plan_export_service is None:
        _plan_export_service = PlanExportService()
    return _plan_export_service
