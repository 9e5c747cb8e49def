"""
Planning Data Models for the Gateway Planner

Defines the data structures shared by the sizing and assignment pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from errors import InvalidCameraError


# =============================================================================
# ENUMS
# =============================================================================

class GatewayType(str, Enum):
    """Built-in gateway unit types"""
    EIGHT_CHANNEL = "8ch"
    SIXTEEN_CHANNEL = "16ch"


class AssignmentState(str, Enum):
    """Progress of an assignment session"""
    UNASSIGNED = "unassigned"
    PARTIALLY_ASSIGNED = "partially_assigned"
    FULLY_ASSIGNED = "fully_assigned"


MIN_LENS_COUNT = 1
MAX_LENS_COUNT = 4
MIN_RESOLUTION_MP = 0.3
MAX_RESOLUTION_MP = 12
MIN_FRAME_RATE = 1
MAX_FRAME_RATE = 60
MIN_STORAGE_DAYS = 1
MAX_STORAGE_DAYS = 365


# =============================================================================
# CAMERA MODELS
# =============================================================================

@dataclass(frozen=True)
class CameraDefinition:
    """One physical camera as entered on the camera form"""
    name: str
    lens_count: int = 1
    streaming_resolution: float = 2
    frame_rate: int = 10
    recording_resolution: float = 2
    storage_days: int = 30

    def validate(self) -> "CameraDefinition":
        """
        Enforce the camera form constraints.

        Raises:
            InvalidCameraError: On the first violated constraint
        """
        if not self.name or not self.name.strip():
            raise InvalidCameraError(self.name, "name", self.name, "camera name is required")
        if not isinstance(self.lens_count, int) or not MIN_LENS_COUNT <= self.lens_count <= MAX_LENS_COUNT:
            raise InvalidCameraError(
                self.name, "lensCount", self.lens_count,
                f"lens count must be between {MIN_LENS_COUNT} and {MAX_LENS_COUNT}",
            )
        for field_name, value in (
            ("streamingResolution", self.streaming_resolution),
            ("recordingResolution", self.recording_resolution),
        ):
            if not MIN_RESOLUTION_MP <= value <= MAX_RESOLUTION_MP:
                raise InvalidCameraError(
                    self.name, field_name, value,
                    f"resolution must be between {MIN_RESOLUTION_MP} and {MAX_RESOLUTION_MP} MP",
                )
        if not isinstance(self.frame_rate, int) or not MIN_FRAME_RATE <= self.frame_rate <= MAX_FRAME_RATE:
            raise InvalidCameraError(
                self.name, "frameRate", self.frame_rate,
                f"frame rate must be between {MIN_FRAME_RATE} and {MAX_FRAME_RATE} fps",
            )
        if not isinstance(self.storage_days, int) or not MIN_STORAGE_DAYS <= self.storage_days <= MAX_STORAGE_DAYS:
            raise InvalidCameraError(
                self.name, "storageDays", self.storage_days,
                f"storage days must be between {MIN_STORAGE_DAYS} and {MAX_STORAGE_DAYS}",
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "lensCount": self.lens_count,
            "streamingResolution": self.streaming_resolution,
            "frameRate": self.frame_rate,
            "recordingResolution": self.recording_resolution,
            "storageDays": self.storage_days,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CameraDefinition":
        streaming = data.get("streamingResolution", 2)
        recording = data.get("recordingResolution")
        if recording is None or data.get("sameAsStreaming", False):
            recording = streaming
        return cls(
            name=data.get("name", ""),
            lens_count=data.get("lensCount", 1),
            streaming_resolution=streaming,
            frame_rate=data.get("frameRate", 10),
            recording_resolution=recording,
            storage_days=data.get("storageDays", 30),
        )


@dataclass(frozen=True)
class Stream:
    """One video stream derived from a camera lens"""
    id: str
    camera_id: str
    throughput: float  # megapixels/second
    storage: float  # terabytes
    name: str = ""
    lens_type: str = ""
    resolution: str = ""
    frame_rate: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "cameraId": self.camera_id,
            "throughput": self.throughput,
            "storage": self.storage,
            "name": self.name,
            "lensType": self.lens_type,
            "resolution": self.resolution,
            "frameRate": self.frame_rate,
        }


# =============================================================================
# GATEWAY MODELS
# =============================================================================

@dataclass(frozen=True)
class GatewayLimits:
    """Per-unit capacity limits of a gateway type"""
    max_streams: int
    max_throughput: float  # megapixels/second
    max_storage: float  # terabytes
    label: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxStreams": self.max_streams,
            "maxThroughput": self.max_throughput,
            "maxStorage": self.max_storage,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GatewayLimits":
        return cls(
            max_streams=int(data["maxStreams"]),
            max_throughput=float(data["maxThroughput"]),
            max_storage=float(data["maxStorage"]),
            label=data.get("label", ""),
        )


@dataclass(frozen=True)
class GatewayConfiguration:
    """Chosen hardware plan: unit type and number of units"""
    type: str
    count: int = 1

    def __post_init__(self):
        # Accept GatewayType members but always store the plain value
        if isinstance(self.type, GatewayType):
            object.__setattr__(self, "type", self.type.value)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "count": self.count}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GatewayConfiguration":
        return cls(type=data["type"], count=int(data.get("count", 1)))


# =============================================================================
# RESULT MODELS
# =============================================================================

@dataclass(frozen=True)
class Calculations:
    """Project-wide demand totals"""
    total_streams: int = 0
    total_throughput: float = 0.0
    total_storage: float = 0.0

    def __add__(self, other: "Calculations") -> "Calculations":
        if not isinstance(other, Calculations):
            return NotImplemented
        return Calculations(
            total_streams=self.total_streams + other.total_streams,
            total_throughput=self.total_throughput + other.total_throughput,
            total_storage=self.total_storage + other.total_storage,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalStreams": self.total_streams,
            "totalThroughput": self.total_throughput,
            "totalStorage": self.total_storage,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Calculations":
        return cls(
            total_streams=int(data.get("totalStreams", 0)),
            total_throughput=float(data.get("totalThroughput", 0.0)),
            total_storage=float(data.get("totalStorage", 0.0)),
        )


@dataclass(frozen=True)
class CapacityResult:
    """Utilization of one gateway instance against its type limits"""
    streams: int
    streams_percent: float
    throughput: float
    throughput_percent: float
    storage: float
    storage_percent: float
    fits: bool

    @property
    def peak_percent(self) -> float:
        """Highest utilization across the three dimensions"""
        return max(self.streams_percent, self.throughput_percent, self.storage_percent)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "streams": self.streams,
            "streamsPercent": self.streams_percent,
            "throughput": self.throughput,
            "throughputPercent": self.throughput_percent,
            "storage": self.storage,
            "storagePercent": self.storage_percent,
            "fits": self.fits,
        }


@dataclass
class ConfigurationCheck:
    """Whether a gateway configuration can carry the aggregated demand"""
    configuration: GatewayConfiguration
    minimum_count: int
    valid: bool
    average_streams_percent: float
    average_throughput_percent: float
    average_storage_percent: float
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gatewayConfig": self.configuration.to_dict(),
            "minimumCount": self.minimum_count,
            "valid": self.valid,
            "averageUtilization": {
                "streamsPercent": self.average_streams_percent,
                "throughputPercent": self.average_throughput_percent,
                "storagePercent": self.average_storage_percent,
            },
            "warnings": self.warnings,
        }


@dataclass
class AutoAssignReport:
    """Outcome of an automatic assignment pass"""
    grouped_cameras: List[str] = field(default_factory=list)
    fallback_cameras: List[str] = field(default_factory=list)
    unassigned: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.unassigned

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupedCameras": self.grouped_cameras,
            "fallbackCameras": self.fallback_cameras,
            "unassigned": self.unassigned,
            "complete": self.complete,
        }
