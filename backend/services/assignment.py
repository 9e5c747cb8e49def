"""
Stream-to-gateway assignment engine.

An ``AssignmentSession`` is an immutable snapshot: every placement, removal
or auto-assignment returns a new session and leaves the original untouched.
A rejected placement returns the very same session object.

Automatic placement is a greedy heuristic:

1. Group streams by camera.
2. Order groups by descending total throughput (ties keep camera order).
3. Put each whole group on the least-loaded instance that can take it,
   judged by the instance's highest utilization percentage before the group
   is added (ties go to the lowest instance index).
4. If no instance takes the whole group, place its streams one by one on the
   first instance, in index order, that still fits. Streams that fit nowhere
   stay unassigned and are listed in the report.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from models import (
    AssignmentState,
    AutoAssignReport,
    CapacityResult,
    GatewayConfiguration,
    GatewayLimits,
    Stream,
)
from errors import UnknownGatewayError, UnknownStreamError, ValidationError
from services.capacity import validate_capacity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of a manual placement attempt"""
    accepted: bool
    session: "AssignmentSession"
    capacity: CapacityResult
    stream_id: str
    gateway_id: str
    previous_gateway_id: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "accepted": self.accepted,
            "streamId": self.stream_id,
            "gatewayId": self.gateway_id,
            "previousGatewayId": self.previous_gateway_id,
            "capacity": self.capacity.to_dict(),
        }


@dataclass(frozen=True)
class AssignmentSession:
    """Immutable assignment of streams to gateway instances"""
    streams: Tuple[Stream, ...]
    configuration: GatewayConfiguration
    limits: GatewayLimits
    # One tuple of streams per gateway instance, indexed by gateway id
    placements: Tuple[Tuple[Stream, ...], ...] = field(default=())

    @classmethod
    def create(
        cls,
        streams: Sequence[Stream],
        configuration: GatewayConfiguration,
        limits: GatewayLimits,
    ) -> "AssignmentSession":
        """Start an unassigned session with ``configuration.count`` empty gateways"""
        if configuration.count < 1:
            raise ValidationError(
                "Gateway count must be at least 1",
                field="count",
                value=configuration.count,
            )
        ids = [s.id for s in streams]
        if len(ids) != len(set(ids)):
            raise ValidationError("Stream ids must be unique", field="streams")
        return cls(
            streams=tuple(streams),
            configuration=configuration,
            limits=limits,
            placements=tuple(() for _ in range(configuration.count)),
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def gateway_ids(self) -> List[str]:
        return [str(i) for i in range(len(self.placements))]

    def _index(self, gateway_id: str) -> int:
        try:
            index = int(gateway_id)
        except (TypeError, ValueError):
            raise UnknownGatewayError(str(gateway_id), len(self.placements))
        if not 0 <= index < len(self.placements):
            raise UnknownGatewayError(str(gateway_id), len(self.placements))
        return index

    def get_stream(self, stream_id: str) -> Stream:
        for stream in self.streams:
            if stream.id == stream_id:
                return stream
        raise UnknownStreamError(stream_id)

    def streams_on(self, gateway_id: str) -> Tuple[Stream, ...]:
        return self.placements[self._index(gateway_id)]

    def gateway_of(self, stream_id: str) -> Optional[str]:
        """Gateway id currently holding the stream, or None"""
        for index, placed in enumerate(self.placements):
            if any(s.id == stream_id for s in placed):
                return str(index)
        return None

    def capacity(self, gateway_id: str) -> CapacityResult:
        return validate_capacity(self.streams_on(gateway_id), self.limits)

    def capacities(self) -> Dict[str, CapacityResult]:
        return {
            str(i): validate_capacity(placed, self.limits)
            for i, placed in enumerate(self.placements)
        }

    def assigned_ids(self) -> List[str]:
        return [s.id for placed in self.placements for s in placed]

    def unassigned_streams(self) -> List[Stream]:
        assigned = set(self.assigned_ids())
        return [s for s in self.streams if s.id not in assigned]

    def is_complete(self) -> bool:
        """Every stream placed exactly once"""
        assigned = self.assigned_ids()
        return (
            len(assigned) == len(set(assigned))
            and set(assigned) == {s.id for s in self.streams}
        )

    @property
    def state(self) -> AssignmentState:
        assigned = len(self.assigned_ids())
        if assigned == 0:
            return AssignmentState.UNASSIGNED
        if self.is_complete():
            return AssignmentState.FULLY_ASSIGNED
        return AssignmentState.PARTIALLY_ASSIGNED

    # -------------------------------------------------------------------------
    # Manual placement
    # -------------------------------------------------------------------------

    def _without(self, stream_id: str) -> Tuple[Tuple[Stream, ...], ...]:
        return tuple(
            tuple(s for s in placed if s.id != stream_id)
            for placed in self.placements
        )

    def try_place(self, stream_id: str, gateway_id: str) -> PlacementResult:
        """
        Move a stream onto a gateway if the result fits.

        The stream is taken off its current gateway first. On rejection the
        returned session is this session, unchanged.
        """
        stream = self.get_stream(stream_id)
        target = self._index(gateway_id)
        previous = self.gateway_of(stream_id)

        remaining = self._without(stream_id)
        candidate = remaining[target] + (stream,)
        capacity = validate_capacity(candidate, self.limits)

        if not capacity.fits:
            logger.debug(
                f"Rejected stream {stream_id} on gateway {gateway_id}: "
                f"{capacity.streams} streams, {capacity.throughput:.1f} MP/s, "
                f"{capacity.storage:.3f} TB"
            )
            return PlacementResult(
                accepted=False,
                session=self,
                capacity=capacity,
                stream_id=stream_id,
                gateway_id=str(target),
                previous_gateway_id=previous,
            )

        placements = remaining[:target] + (candidate,) + remaining[target + 1:]
        return PlacementResult(
            accepted=True,
            session=self._replace(placements),
            capacity=capacity,
            stream_id=stream_id,
            gateway_id=str(target),
            previous_gateway_id=previous,
        )

    def remove_stream(self, stream_id: str) -> "AssignmentSession":
        """Return the stream to the unassigned pool"""
        self.get_stream(stream_id)
        if self.gateway_of(stream_id) is None:
            return self
        return self._replace(self._without(stream_id))

    def clear_all(self) -> "AssignmentSession":
        return self._replace(tuple(() for _ in self.placements))

    # -------------------------------------------------------------------------
    # Automatic placement
    # -------------------------------------------------------------------------

    def auto_assign(self) -> "AssignmentSession":
        session, _ = self.auto_assign_with_report()
        return session

    def auto_assign_with_report(self) -> Tuple["AssignmentSession", AutoAssignReport]:
        """
        Recompute the whole assignment from a clean slate.

        Returns:
            (new session, report of grouped/fallback cameras and unassigned streams)
        """
        working: List[List[Stream]] = [[] for _ in self.placements]
        report = AutoAssignReport()

        groups: "OrderedDict[str, List[Stream]]" = OrderedDict()
        for stream in self.streams:
            groups.setdefault(stream.camera_id, []).append(stream)

        # sorted() stays stable with reverse=True, so ties keep camera order
        ordered = sorted(
            groups.items(),
            key=lambda item: sum(s.throughput for s in item[1]),
            reverse=True,
        )

        for camera_id, group in ordered:
            best_index = None
            lowest_usage = float("inf")
            for index, placed in enumerate(working):
                usage = validate_capacity(placed, self.limits).peak_percent
                if not validate_capacity(placed + group, self.limits).fits:
                    continue
                if usage < lowest_usage:
                    best_index = index
                    lowest_usage = usage

            if best_index is not None:
                working[best_index].extend(group)
                report.grouped_cameras.append(camera_id)
                continue

            report.fallback_cameras.append(camera_id)
            for stream in group:
                for placed in working:
                    if validate_capacity(placed + [stream], self.limits).fits:
                        placed.append(stream)
                        break
                else:
                    report.unassigned.append(stream.id)

        if report.unassigned:
            logger.warning(
                f"Auto-assign left {len(report.unassigned)} stream(s) unassigned: "
                f"{', '.join(report.unassigned)}"
            )

        session = self._replace(tuple(tuple(placed) for placed in working))
        return session, report

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _replace(self, placements: Tuple[Tuple[Stream, ...], ...]) -> "AssignmentSession":
        return AssignmentSession(
            streams=self.streams,
            configuration=self.configuration,
            limits=self.limits,
            placements=placements,
        )

    def to_dict(self) -> Dict:
        capacities = self.capacities()
        return {
            "gatewayConfig": self.configuration.to_dict(),
            "limits": self.limits.to_dict(),
            "state": self.state.value,
            "complete": self.is_complete(),
            "gateways": [
                {
                    "id": gateway_id,
                    "streams": [s.id for s in self.streams_on(gateway_id)],
                    "capacity": capacities[gateway_id].to_dict(),
                }
                for gateway_id in self.gateway_ids
            ],
            "unassigned": [s.id for s in self.unassigned_streams()],
        }
