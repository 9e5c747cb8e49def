"""
Stream demand derivation.

Turns camera definitions into per-lens stream records carrying the
throughput (MP/s) and retained storage (TB) each stream consumes.
"""

from typing import Dict, List, Sequence

from models import CameraDefinition, Stream


# Recording bitrate (Mb/s) by recording resolution (MP)
BITRATE_TABLE: Dict[float, float] = {
    0.3: 1.0,
    1: 1.5,
    2: 2.0,
    4: 2.5,
    5: 2.8,
    6: 3.0,
    8: 3.5,
    12: 4.0,
}
DEFAULT_BITRATE_MBPS = 2.0

SECONDS_PER_DAY = 86400
# bits -> bytes (8), megabytes -> terabytes (1,000,000)
MEGABITS_PER_TERABYTE = 8_000_000

LENS_TYPE_TEXT = {
    1: "Single Lens",
    2: "Dual Lens",
    3: "Triple Lens",
    4: "Quad Lens",
}


def bitrate_for_resolution(resolution: float) -> float:
    """Recording bitrate in Mb/s, 2.0 for resolutions not in the table"""
    return BITRATE_TABLE.get(resolution, DEFAULT_BITRATE_MBPS)


def lens_type_text(lens_count: int) -> str:
    return LENS_TYPE_TEXT.get(lens_count, "Custom Lens")


def stream_throughput(camera: CameraDefinition) -> float:
    """Megapixels per second for one stream of this camera"""
    return camera.streaming_resolution * camera.frame_rate


def stream_storage(camera: CameraDefinition) -> float:
    """Terabytes retained for one stream of this camera"""
    bitrate = bitrate_for_resolution(camera.recording_resolution)
    return SECONDS_PER_DAY * camera.storage_days * bitrate / MEGABITS_PER_TERABYTE


def camera_throughput(camera: CameraDefinition) -> float:
    """Total MP/s across all lenses of a camera"""
    return stream_throughput(camera) * camera.lens_count


def camera_storage(camera: CameraDefinition) -> float:
    """Total TB across all lenses of a camera"""
    return stream_storage(camera) * camera.lens_count


def derive_streams(camera: CameraDefinition, camera_index: int) -> List[Stream]:
    """
    Derive one stream per lens.

    Inputs are expected to be validated already; every stream of a camera
    carries identical demand.

    Args:
        camera: Source camera definition
        camera_index: Position of the camera in the finalized camera list

    Returns:
        ``lens_count`` streams with ids ``"{camera_index}-{lens_index}"``
    """
    throughput = stream_throughput(camera)
    storage = stream_storage(camera)
    lens_type = lens_type_text(camera.lens_count)

    streams = []
    for lens_index in range(camera.lens_count):
        if camera.lens_count == 1:
            name = camera.name
        else:
            name = f"{camera.name} (Stream {lens_index + 1})"
        streams.append(Stream(
            id=f"{camera_index}-{lens_index}",
            camera_id=f"camera-{camera_index}",
            throughput=throughput,
            storage=storage,
            name=name,
            lens_type=lens_type,
            resolution=f"{camera.streaming_resolution:g} MP",
            frame_rate=f"{camera.frame_rate} fps",
        ))
    return streams


def derive_all_streams(cameras: Sequence[CameraDefinition]) -> List[Stream]:
    """Derive streams for a finalized camera list, preserving camera order"""
    streams: List[Stream] = []
    for camera_index, camera in enumerate(cameras):
        streams.extend(derive_streams(camera, camera_index))
    return streams
