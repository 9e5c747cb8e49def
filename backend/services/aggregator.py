"""
Requirement aggregation: project-wide stream, throughput and storage totals.
"""

from typing import Iterable

from models import CameraDefinition, Calculations, Stream
from services.demand import camera_storage, camera_throughput


def calculate_requirements(streams: Iterable[Stream]) -> Calculations:
    """Sum per-stream demand. Always a full recomputation."""
    total_streams = 0
    total_throughput = 0.0
    total_storage = 0.0

    for stream in streams:
        total_streams += 1
        total_throughput += stream.throughput
        total_storage += stream.storage

    return Calculations(
        total_streams=total_streams,
        total_throughput=total_throughput,
        total_storage=total_storage,
    )


def calculate_camera_requirements(cameras: Iterable[CameraDefinition]) -> Calculations:
    """Same totals computed straight from camera definitions"""
    total = Calculations()
    for camera in cameras:
        total = total + Calculations(
            total_streams=camera.lens_count,
            total_throughput=camera_throughput(camera),
            total_storage=camera_storage(camera),
        )
    return total
