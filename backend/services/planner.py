"""
Gateway planning service

Orchestrates a planning session: finalize the camera list, size the
gateways, accept or override the configuration, assign streams and export
the resulting plan.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from models import (
    AutoAssignReport,
    CameraDefinition,
    Calculations,
    ConfigurationCheck,
    GatewayConfiguration,
)
from errors import ConfigurationUnderflowError, ValidationError
from services.aggregator import calculate_requirements
from services.assignment import AssignmentSession, PlacementResult
from services.catalog import GatewayCatalog, get_gateway_catalog
from services.demand import derive_all_streams
from services.export import PlanExportService, build_export_document, get_plan_export_service
from services.recommendation import check_configuration, recommend
from services.session_store import PlanningSession, SessionStore
from config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

CameraInput = Union[CameraDefinition, Dict[str, Any]]


class GatewayPlanningService:
    """
    Service for sizing gateways and assigning camera streams to them.

    Holds planning sessions in a ``SessionStore``; every mutating call runs
    under the session's lock and swaps in a new assignment snapshot.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        catalog: Optional[GatewayCatalog] = None,
        exporter: Optional[PlanExportService] = None,
        persist_exports: Optional[bool] = None,
    ):
        self.store = store or SessionStore(
            ttl_minutes=settings.session_ttl_minutes,
            max_sessions=settings.max_sessions,
        )
        self.catalog = catalog or get_gateway_catalog()
        self.exporter = exporter or get_plan_export_service()
        self._persist_exports = (
            settings.persist_exports if persist_exports is None else persist_exports
        )

    # -------------------------------------------------------------------------
    # Sizing
    # -------------------------------------------------------------------------

    def _parse_cameras(self, cameras: Sequence[CameraInput]) -> List[CameraDefinition]:
        """Parse and validate the camera list"""
        parsed = []
        for camera in cameras:
            if not isinstance(camera, CameraDefinition):
                camera = CameraDefinition.from_dict(camera)
            parsed.append(camera.validate())
        return parsed

    def calculate(
        self, cameras: Sequence[CameraInput]
    ) -> Tuple[Calculations, GatewayConfiguration]:
        """
        Aggregate demand and recommend a configuration.

        Raises:
            InvalidCameraError: If any camera breaks a form constraint
        """
        parsed = self._parse_cameras(cameras)
        calculations = calculate_requirements(derive_all_streams(parsed))
        return calculations, recommend(calculations, self.catalog)

    def check(
        self, calculations: Calculations, configuration: GatewayConfiguration
    ) -> ConfigurationCheck:
        return check_configuration(
            calculations,
            configuration,
            self.catalog,
            warning_percent=settings.capacity_warning_percent,
        )

    def _validated_configuration(
        self, calculations: Calculations, configuration: GatewayConfiguration
    ) -> ConfigurationCheck:
        if configuration.count < 1:
            raise ValidationError(
                "Gateway count must be at least 1",
                field="count",
                value=configuration.count,
            )
        result = self.check(calculations, configuration)
        if not result.valid:
            raise ConfigurationUnderflowError(
                configuration.type, configuration.count, result.minimum_count
            )
        return result

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def create_session(
        self,
        cameras: Sequence[CameraInput],
        configuration: Optional[GatewayConfiguration] = None,
    ) -> PlanningSession:
        """
        Finalize a camera list and open an unassigned planning session.

        Args:
            cameras: Camera definitions (dataclasses or camelCase dicts)
            configuration: Optional override; defaults to the recommendation

        Raises:
            InvalidCameraError: If any camera breaks a form constraint
            ConfigurationUnderflowError: If the override is too small
        """
        parsed = self._parse_cameras(cameras)
        streams = derive_all_streams(parsed)
        calculations = calculate_requirements(streams)
        recommendation = recommend(calculations, self.catalog)

        chosen = configuration or recommendation
        self._validated_configuration(calculations, chosen)

        session = PlanningSession(
            cameras=tuple(parsed),
            streams=tuple(streams),
            calculations=calculations,
            recommendation=recommendation,
            assignment=AssignmentSession.create(
                streams, chosen, self.catalog.get(chosen.type)
            ),
        )
        self.store.add(session)
        session.plog.info(
            f"Session opened: {len(parsed)} cameras, {len(streams)} streams, "
            f"{chosen.count} x {chosen.type}"
        )
        return session

    def get_session(self, session_id: str) -> PlanningSession:
        return self.store.get(session_id)

    def delete_session(self, session_id: str) -> None:
        self.store.remove(session_id)
        logger.info(f"Planning session {session_id} discarded")

    def set_configuration(
        self, session_id: str, configuration: GatewayConfiguration
    ) -> ConfigurationCheck:
        """
        Replace the session's gateway configuration.

        Changing the configuration starts a fresh, unassigned session.

        Raises:
            ConfigurationUnderflowError: If the count is below the minimum
        """
        with self.store.locked(session_id) as session:
            result = self._validated_configuration(session.calculations, configuration)
            session.assignment = AssignmentSession.create(
                session.streams, configuration, self.catalog.get(configuration.type)
            )
            session.plog.info(
                f"Configuration set to {configuration.count} x {configuration.type}"
            )
            return result

    # -------------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------------

    def place(self, session_id: str, stream_id: str, gateway_id: str) -> PlacementResult:
        """Manual placement; a rejection leaves the session unchanged"""
        with self.store.locked(session_id) as session:
            result = session.assignment.try_place(stream_id, gateway_id)
            if result.accepted:
                session.assignment = result.session
                session.plog.debug(f"Placed stream {stream_id} on gateway {gateway_id}")
            else:
                session.plog.info(
                    f"Stream {stream_id} does not fit on gateway {gateway_id}"
                )
            return result

    def remove(self, session_id: str, stream_id: str) -> AssignmentSession:
        with self.store.locked(session_id) as session:
            session.assignment = session.assignment.remove_stream(stream_id)
            return session.assignment

    def auto_assign(self, session_id: str) -> Tuple[AssignmentSession, AutoAssignReport]:
        """
        Recompute the whole assignment automatically.

        Returns:
            (assignment produced by this call, report)
        """
        with self.store.locked(session_id) as session:
            with session.plog.stage("auto_assign") as stage:
                assignment, report = session.assignment.auto_assign_with_report()
                session.assignment = assignment
                stage.metadata["grouped"] = len(report.grouped_cameras)
                stage.metadata["fallback"] = len(report.fallback_cameras)
                stage.metadata["unassigned"] = len(report.unassigned)
            if report.unassigned:
                session.plog.warning(
                    f"{len(report.unassigned)} stream(s) could not be assigned; "
                    "add gateway capacity"
                )
            return assignment, report

    def clear(self, session_id: str) -> AssignmentSession:
        with self.store.locked(session_id) as session:
            session.assignment = session.assignment.clear_all()
            return session.assignment

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export(self, session_id: str, persist: Optional[bool] = None) -> Dict[str, Any]:
        """
        Build the export document and optionally store it in plan history.

        Returns:
            Export document; includes ``planId`` when persisted
        """
        with self.store.locked(session_id) as session:
            with session.plog.stage("export"):
                document = build_export_document(
                    session.cameras, session.calculations, session.assignment
                )
                document["sessionId"] = session_id

        should_persist = self._persist_exports if persist is None else persist
        if should_persist:
            plan_id = self.exporter.persist(session_id, document)
            if plan_id is not None:
                document["planId"] = plan_id
        return document

    def to_response(self, session: PlanningSession) -> Dict[str, Any]:
        """Convert a planning session to its API response dict"""
        return {
            "sessionId": session.session_id,
            "cameras": [c.to_dict() for c in session.cameras],
            "streams": [s.to_dict() for s in session.streams],
            "calculations": session.calculations.to_dict(),
            "recommendation": session.recommendation.to_dict(),
            "configurationCheck": self.check(
                session.calculations, session.configuration
            ).to_dict(),
            "assignment": session.assignment.to_dict(),
            "stages": session.plog.to_dict()["stages"],
            "createdAt": session.created_at.isoformat() + "Z",
        }


# Global service instance
_planning_service: Optional[GatewayPlanningService] = None


def get_planning_service() -> GatewayPlanningService:
    """Get or create planning service singleton"""
    global _planning_service
    if _planning_service is None:
        _planning_service = GatewayPlanningService()
    return _planning_service
