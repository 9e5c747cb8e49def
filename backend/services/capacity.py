"""
Capacity validation for a single gateway instance.

Storage is compared in terabytes on both sides, the same unit the catalog
uses for ``max_storage``.
"""

from typing import Iterable

from models import CapacityResult, GatewayLimits, Stream


def validate_capacity(streams: Iterable[Stream], limits: GatewayLimits) -> CapacityResult:
    """
    Compute utilization and the fit verdict for a candidate stream set.

    Args:
        streams: Streams proposed for one gateway instance
        limits: Catalog limits of the active gateway type

    Returns:
        CapacityResult with used amounts, percentages and ``fits``
    """
    stream_count = 0
    throughput = 0.0
    storage = 0.0
    for stream in streams:
        stream_count += 1
        throughput += stream.throughput
        storage += stream.storage

    fits = (
        stream_count <= limits.max_streams
        and throughput <= limits.max_throughput
        and storage <= limits.max_storage
    )

    return CapacityResult(
        streams=stream_count,
        streams_percent=stream_count / limits.max_streams * 100,
        throughput=throughput,
        throughput_percent=throughput / limits.max_throughput * 100,
        storage=storage,
        storage_percent=storage / limits.max_storage * 100,
        fits=fits,
    )
