"""
Gateway recommendation.

Sizes a gateway configuration from aggregated demand and checks user
overrides against the minimum unit count for the selected type.
"""

import logging
import math
from typing import Optional

from models import (
    Calculations,
    ConfigurationCheck,
    GatewayConfiguration,
    GatewayLimits,
    GatewayType,
)
from services.catalog import GatewayCatalog, get_gateway_catalog

logger = logging.getLogger(__name__)

DEFAULT_WARNING_PERCENT = 90.0


def minimum_gateway_count(calculations: Calculations, limits: GatewayLimits) -> int:
    """
    Smallest unit count whose combined limits cover every dimension.

    Assumes demand divides evenly across units, so this is necessary but not
    sufficient; per-instance fit is re-checked during assignment. Never
    below one unit.
    """
    return max(
        math.ceil(calculations.total_streams / limits.max_streams),
        math.ceil(calculations.total_throughput / limits.max_throughput),
        math.ceil(calculations.total_storage / limits.max_storage),
        1,
    )


def fits_single_unit(calculations: Calculations, limits: GatewayLimits) -> bool:
    return (
        calculations.total_streams <= limits.max_streams
        and calculations.total_throughput <= limits.max_throughput
        and calculations.total_storage <= limits.max_storage
    )


def recommend(
    calculations: Calculations,
    catalog: Optional[GatewayCatalog] = None,
) -> GatewayConfiguration:
    """
    Recommend a gateway configuration.

    One 8-channel unit when the whole project fits on it, otherwise the
    minimum number of 16-channel units.
    """
    catalog = catalog or get_gateway_catalog()
    small = catalog.get(GatewayType.EIGHT_CHANNEL)

    if fits_single_unit(calculations, small):
        config = GatewayConfiguration(type=GatewayType.EIGHT_CHANNEL, count=1)
    else:
        large = catalog.get(GatewayType.SIXTEEN_CHANNEL)
        config = GatewayConfiguration(
            type=GatewayType.SIXTEEN_CHANNEL,
            count=minimum_gateway_count(calculations, large),
        )

    logger.info(
        f"Recommended {config.count} x {config.type} for "
        f"{calculations.total_streams} streams, "
        f"{calculations.total_throughput:.1f} MP/s, "
        f"{calculations.total_storage:.3f} TB"
    )
    return config


def _average_percent(total: float, count: int, limit: float) -> float:
    return min(100.0, (total / count) / limit * 100)


def check_configuration(
    calculations: Calculations,
    configuration: GatewayConfiguration,
    catalog: Optional[GatewayCatalog] = None,
    warning_percent: float = DEFAULT_WARNING_PERCENT,
) -> ConfigurationCheck:
    """
    Check a (possibly user-chosen) configuration against the demand.

    A count below the minimum for the selected type is flagged as invalid;
    average per-unit utilization above ``warning_percent`` adds a warning.
    """
    catalog = catalog or get_gateway_catalog()
    limits = catalog.get(configuration.type)
    minimum = minimum_gateway_count(calculations, limits)
    count = max(configuration.count, 1)

    streams_pct = _average_percent(calculations.total_streams, count, limits.max_streams)
    throughput_pct = _average_percent(calculations.total_throughput, count, limits.max_throughput)
    storage_pct = _average_percent(calculations.total_storage, count, limits.max_storage)

    warnings = []
    valid = configuration.count >= minimum
    if not valid:
        warnings.append(
            f"At least {minimum} x {configuration.type} gateway(s) required; "
            f"{configuration.count} selected"
        )
    for label, pct in (
        ("Streams", streams_pct),
        ("Throughput", throughput_pct),
        ("Storage", storage_pct),
    ):
        if pct > warning_percent:
            warnings.append(f"{label} utilization averages {pct:.0f}% per gateway")

    return ConfigurationCheck(
        configuration=configuration,
        minimum_count=minimum,
        valid=valid,
        average_streams_percent=streams_pct,
        average_throughput_percent=throughput_pct,
        average_storage_percent=storage_pct,
        warnings=warnings,
    )
