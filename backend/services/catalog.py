"""
Gateway catalog: per-unit capacity limits by gateway type.
"""

import json
import logging
from typing import Dict, List, Optional

from models import GatewayLimits, GatewayType
from errors import ConfigurationError, UnknownGatewayTypeError
from config import get_settings

logger = logging.getLogger(__name__)


DEFAULT_GATEWAY_LIMITS: Dict[str, GatewayLimits] = {
    GatewayType.EIGHT_CHANNEL.value: GatewayLimits(
        max_streams=8,
        max_throughput=320,
        max_storage=6,
        label="8-Channel",
    ),
    GatewayType.SIXTEEN_CHANNEL.value: GatewayLimits(
        max_streams=16,
        max_throughput=640,
        max_storage=12,
        label="16-Channel",
    ),
}


class GatewayCatalog:
    """Lookup of gateway types to their capacity limits"""

    def __init__(self, entries: Optional[Dict[str, GatewayLimits]] = None):
        self._entries: Dict[str, GatewayLimits] = dict(
            DEFAULT_GATEWAY_LIMITS if entries is None else entries
        )

    def get(self, gateway_type: str) -> GatewayLimits:
        """
        Get limits for a gateway type.

        Raises:
            UnknownGatewayTypeError: If the type is not in the catalog
        """
        key = gateway_type.value if isinstance(gateway_type, GatewayType) else gateway_type
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownGatewayTypeError(key, self.types())

    def register(self, gateway_type: str, limits: GatewayLimits) -> None:
        """Add or replace a gateway type"""
        if limits.max_streams <= 0 or limits.max_throughput <= 0 or limits.max_storage <= 0:
            raise ConfigurationError(
                f"Gateway type {gateway_type} must have positive limits",
                setting="gateway_extra_types",
                details={"limits": limits.to_dict()},
            )
        self._entries[gateway_type] = limits
        logger.debug(f"Registered gateway type {gateway_type}: {limits}")

    def types(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, gateway_type: str) -> bool:
        return gateway_type in self._entries

    def to_dict(self) -> Dict[str, Dict]:
        return {name: limits.to_dict() for name, limits in self._entries.items()}

    def load_extra_types(self, raw: str) -> None:
        """
        Register extra gateway types from a JSON object string.

        Raises:
            ConfigurationError: If the JSON is malformed or an entry lacks a limit
        """
        if not raw:
            return
        try:
            data = json.loads(raw)
            for name, entry in data.items():
                limits = GatewayLimits.from_dict({"label": name, **entry})
                self.register(name, limits)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError(
                f"Invalid gateway catalog configuration: {e}",
                setting="gateway_extra_types",
            )


# Global catalog instance
_gateway_catalog: Optional[GatewayCatalog] = None


def get_gateway_catalog() -> GatewayCatalog:
    """Get or create the catalog singleton, including configured extra types"""
    global _gateway_catalog
    if _gateway_catalog is None:
        catalog = GatewayCatalog()
        catalog.load_extra_types(get_settings().gateway_extra_types)
        _gateway_catalog = catalog
    return _gateway_catalog
