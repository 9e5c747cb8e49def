"""
Tests for the export document and its formatting helpers.
"""

from datetime import datetime

import pytest


@pytest.fixture
def assigned_session(sample_camera):
    """Example camera auto-assigned on the recommended 1 x 8ch"""
    from models import GatewayConfiguration
    from services.assignment import AssignmentSession
    from services.catalog import DEFAULT_GATEWAY_LIMITS
    from services.demand import derive_streams

    streams = derive_streams(sample_camera, 0)
    session = AssignmentSession.create(
        streams, GatewayConfiguration("8ch", 1), DEFAULT_GATEWAY_LIMITS["8ch"]
    )
    return session.auto_assign()


class TestFormatting:
    """Tests for the summary formatting helpers."""

    @pytest.mark.parametrize("storage,expected", [
        (0.648, "648 GB"),
        (0.05, "50 GB"),
        (1.296, "1.3 TB"),
        (12, "12 TB"),
    ])
    def test_format_storage(self, storage, expected):
        from services.export import format_storage
        assert format_storage(storage) == expected

    def test_format_throughput(self):
        from services.export import format_throughput

        assert format_throughput(40) == "40 MP/s"
        assert format_throughput(119.6) == "120 MP/s"

    def test_power_consumption(self):
        from services.export import estimate_power_consumption

        assert estimate_power_consumption(0) == 45
        assert estimate_power_consumption(2) == 55
        assert estimate_power_consumption(4, base_watts=30, per_stream_watts=7.5) == 60

    def test_storage_cost_per_started_terabyte(self):
        from services.export import estimate_storage_cost

        assert estimate_storage_cost(0) == 0
        assert estimate_storage_cost(1.296) == 300
        assert estimate_storage_cost(6.0) == 900
        assert estimate_storage_cost(0.5, cost_per_tb=80) == 80

    def test_gateway_label(self):
        from services.export import gateway_label

        assert gateway_label("16ch") == "16-Channel"
        assert gateway_label("custom") == "custom"


class TestExportDocument:
    """Tests for build_export_document."""

    def test_document_structure(self, sample_camera, assigned_session):
        from services.aggregator import calculate_requirements
        from services.export import build_export_document

        calculations = calculate_requirements(assigned_session.streams)
        document = build_export_document(
            [sample_camera], calculations, assigned_session,
            exported_at=datetime(2024, 3, 1, 12, 0, 0),
        )

        assert document["cameras"] == [sample_camera.to_dict()]
        assert document["calculations"]["totalStreams"] == 2
        assert document["gatewayConfig"] == {"type": "8ch", "count": 1}
        assert document["assignments"] == {"0": ["0-0", "0-1"]}
        assert document["unassigned"] == []
        assert document["complete"] is True
        assert document["exportedAt"] == "2024-03-01T12:00:00Z"

    def test_gateway_entries(self, sample_camera, assigned_session):
        from services.aggregator import calculate_requirements
        from services.export import build_export_document

        document = build_export_document(
            [sample_camera], calculate_requirements(assigned_session.streams), assigned_session
        )

        gateway = document["gateways"][0]
        assert gateway["id"] == "0"
        assert [s["id"] for s in gateway["streams"]] == ["0-0", "0-1"]
        assert gateway["streams"][0]["name"] == "Front Door (Stream 1)"
        assert gateway["capacity"]["throughput"] == 40
        assert gateway["estimatedPowerWatts"] == 55

    def test_summary(self, sample_camera, assigned_session):
        from services.aggregator import calculate_requirements
        from services.export import build_export_document

        document = build_export_document(
            [sample_camera], calculate_requirements(assigned_session.streams), assigned_session
        )

        assert document["summary"] == {
            "totalCameras": 1,
            "gatewayLabel": "1 x 8-Channel Gateway",
            "formattedStorage": "1.3 TB",
            "formattedThroughput": "40 MP/s",
            "estimatedPowerWatts": 55,
            "estimatedStorageCost": 300,
        }

    def test_partial_plan_on_several_gateways(self, sample_camera):
        from models import GatewayConfiguration
        from services.aggregator import calculate_requirements
        from services.assignment import AssignmentSession
        from services.catalog import DEFAULT_GATEWAY_LIMITS
        from services.demand import derive_streams
        from services.export import build_export_document

        streams = derive_streams(sample_camera, 0)
        session = AssignmentSession.create(
            streams, GatewayConfiguration("16ch", 2), DEFAULT_GATEWAY_LIMITS["16ch"]
        )
        session = session.try_place("0-1", "1").session

        document = build_export_document(
            [sample_camera], calculate_requirements(streams), session
        )

        assert document["assignments"] == {"0": [], "1": ["0-1"]}
        assert document["unassigned"] == ["0-0"]
        assert document["complete"] is False
        assert document["summary"]["gatewayLabel"] == "2 x 16-Channel Gateways"
        # 45 W idle per unit plus 5 W for the one placed stream
        assert document["summary"]["estimatedPowerWatts"] == 95
