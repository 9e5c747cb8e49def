"""
Tests for requirement aggregation, the gateway catalog and recommendations.
"""

import pytest


class TestAggregator:
    """Tests for calculate_requirements."""

    def test_example_totals(self, sample_camera):
        from services.aggregator import calculate_requirements
        from services.demand import derive_streams

        calc = calculate_requirements(derive_streams(sample_camera, 0))

        assert calc.total_streams == 2
        assert calc.total_throughput == 40
        assert calc.total_storage == pytest.approx(1.296)

    def test_empty_stream_list(self):
        from models import Calculations
        from services.aggregator import calculate_requirements

        assert calculate_requirements([]) == Calculations()

    @pytest.mark.parametrize("split", [0, 1, 3, 5, 6])
    def test_additive_over_any_split(self, stream_factory, split):
        """Totals of a split list combine to the totals of the whole list"""
        from services.aggregator import calculate_requirements

        streams = [
            stream_factory(f"{i}-0", f"camera-{i}", throughput=10.0 * (i + 1), storage=0.25 * i)
            for i in range(6)
        ]

        whole = calculate_requirements(streams)
        combined = calculate_requirements(streams[:split]) + calculate_requirements(streams[split:])

        assert combined.total_streams == whole.total_streams
        assert combined.total_throughput == pytest.approx(whole.total_throughput)
        assert combined.total_storage == pytest.approx(whole.total_storage)

    def test_camera_requirements_match_stream_requirements(self, sample_camera, sample_camera_dict):
        from models import CameraDefinition
        from services.aggregator import calculate_camera_requirements, calculate_requirements
        from services.demand import derive_all_streams

        cameras = [sample_camera, CameraDefinition.from_dict(sample_camera_dict)]

        from_streams = calculate_requirements(derive_all_streams(cameras))
        from_cameras = calculate_camera_requirements(cameras)

        assert from_cameras.total_streams == from_streams.total_streams
        assert from_cameras.total_throughput == pytest.approx(from_streams.total_throughput)
        assert from_cameras.total_storage == pytest.approx(from_streams.total_storage)


class TestGatewayCatalog:
    """Tests for GatewayCatalog."""

    def test_default_limits(self):
        from services.catalog import GatewayCatalog

        catalog = GatewayCatalog()

        small = catalog.get("8ch")
        large = catalog.get("16ch")
        assert (small.max_streams, small.max_throughput, small.max_storage) == (8, 320, 6)
        assert (large.max_streams, large.max_throughput, large.max_storage) == (16, 640, 12)

    def test_accepts_enum_member(self):
        from models import GatewayType
        from services.catalog import GatewayCatalog

        assert GatewayCatalog().get(GatewayType.SIXTEEN_CHANNEL).max_streams == 16

    def test_unknown_type(self):
        from errors import UnknownGatewayTypeError
        from services.catalog import GatewayCatalog

        with pytest.raises(UnknownGatewayTypeError) as exc_info:
            GatewayCatalog().get("64ch")

        assert exc_info.value.details["knownTypes"] == ["8ch", "16ch"]

    def test_register_extra_type(self):
        from models import GatewayLimits
        from services.catalog import GatewayCatalog

        catalog = GatewayCatalog()
        catalog.register("32ch", GatewayLimits(32, 1280, 24, "32-Channel"))

        assert "32ch" in catalog
        assert catalog.get("32ch").max_storage == 24

    def test_register_rejects_non_positive_limits(self):
        from errors import ConfigurationError
        from models import GatewayLimits
        from services.catalog import GatewayCatalog

        with pytest.raises(ConfigurationError):
            GatewayCatalog().register("broken", GatewayLimits(0, 100, 1))

    def test_load_extra_types_from_json(self):
        from services.catalog import GatewayCatalog

        catalog = GatewayCatalog()
        catalog.load_extra_types('{"4ch": {"maxStreams": 4, "maxThroughput": 160, "maxStorage": 3}}')

        limits = catalog.get("4ch")
        assert limits.max_streams == 4
        assert limits.label == "4ch"

    @pytest.mark.parametrize("raw", ["not json", '{"4ch": {"maxStreams": 4}}', "[1, 2]"])
    def test_load_extra_types_invalid(self, raw):
        from errors import ConfigurationError
        from services.catalog import GatewayCatalog

        with pytest.raises(ConfigurationError):
            GatewayCatalog().load_extra_types(raw)


class TestRecommendation:
    """Tests for recommend / minimum_gateway_count."""

    @pytest.fixture
    def catalog(self):
        from services.catalog import GatewayCatalog
        return GatewayCatalog()

    def test_example_recommends_single_8ch(self, catalog):
        from models import Calculations
        from services.recommendation import recommend

        config = recommend(Calculations(2, 40, 1.296), catalog)

        assert config.type == "8ch"
        assert config.count == 1

    def test_exactly_at_8ch_limits(self, catalog):
        from models import Calculations
        from services.recommendation import recommend

        assert recommend(Calculations(8, 320, 6), catalog).type == "8ch"

    @pytest.mark.parametrize("calc,expected_count", [
        ((9, 100, 1), 1),
        ((8, 321, 1), 1),
        ((8, 100, 6.5), 1),
        ((17, 100, 1), 2),
        ((10, 1300, 1), 3),
        ((10, 100, 40), 4),
        ((48, 1900, 30), 3),
    ])
    def test_recommends_minimum_16ch(self, catalog, calc, expected_count):
        from models import Calculations
        from services.recommendation import recommend

        config = recommend(Calculations(*calc), catalog)

        assert config.type == "16ch"
        assert config.count == expected_count

    def test_minimum_count_for_selected_type(self, eight_channel_limits):
        from models import Calculations
        from services.recommendation import minimum_gateway_count

        assert minimum_gateway_count(Calculations(20, 100, 1), eight_channel_limits) == 3
        assert minimum_gateway_count(Calculations(4, 700, 1), eight_channel_limits) == 3
        assert minimum_gateway_count(Calculations(4, 100, 13), eight_channel_limits) == 3

    def test_minimum_count_never_below_one(self, sixteen_channel_limits):
        from models import Calculations
        from services.recommendation import minimum_gateway_count

        assert minimum_gateway_count(Calculations(), sixteen_channel_limits) == 1

    @pytest.mark.parametrize("dimension", ["total_streams", "total_throughput", "total_storage"])
    def test_count_is_monotonic(self, sixteen_channel_limits, dimension):
        """Raising any demand dimension never lowers the count for a fixed type"""
        from dataclasses import replace
        from models import Calculations
        from services.recommendation import minimum_gateway_count

        base = Calculations(10, 300, 5)
        previous = minimum_gateway_count(base, sixteen_channel_limits)
        for step in range(1, 40):
            value = getattr(base, dimension) * (1 + step * 0.25)
            if dimension == "total_streams":
                value = int(value)
            current = minimum_gateway_count(replace(base, **{dimension: value}), sixteen_channel_limits)
            assert current >= previous
            previous = current


class TestConfigurationCheck:
    """Tests for check_configuration (user override validation)."""

    @pytest.fixture
    def catalog(self):
        from services.catalog import GatewayCatalog
        return GatewayCatalog()

    def test_valid_configuration(self, catalog):
        from models import Calculations, GatewayConfiguration
        from services.recommendation import check_configuration

        check = check_configuration(Calculations(20, 400, 6), GatewayConfiguration("16ch", 2), catalog)

        assert check.valid is True
        assert check.minimum_count == 2
        assert check.average_streams_percent == pytest.approx(62.5)
        assert check.average_throughput_percent == pytest.approx(31.25)
        assert check.average_storage_percent == pytest.approx(25.0)
        assert check.warnings == []

    def test_underflow_flagged(self, catalog):
        from models import Calculations, GatewayConfiguration
        from services.recommendation import check_configuration

        check = check_configuration(Calculations(20, 400, 6), GatewayConfiguration("8ch", 2), catalog)

        assert check.valid is False
        assert check.minimum_count == 3
        # Averages are capped at 100%
        assert check.average_streams_percent == 100.0
        assert any("At least 3" in w for w in check.warnings)

    def test_high_utilization_warning(self, catalog):
        from models import Calculations, GatewayConfiguration
        from services.recommendation import check_configuration

        check = check_configuration(Calculations(15, 100, 1), GatewayConfiguration("16ch", 1), catalog)

        assert check.valid is True
        assert any(w.startswith("Streams utilization") for w in check.warnings)

    def test_custom_warning_threshold(self, catalog):
        from models import Calculations, GatewayConfiguration
        from services.recommendation import check_configuration

        check = check_configuration(
            Calculations(10, 100, 1), GatewayConfiguration("16ch", 1), catalog, warning_percent=50
        )

        assert len(check.warnings) == 1

    def test_unknown_type(self, catalog):
        from errors import UnknownGatewayTypeError
        from models import Calculations, GatewayConfiguration
        from services.recommendation import check_configuration

        with pytest.raises(UnknownGatewayTypeError):
            check_configuration(Calculations(1, 1, 1), GatewayConfiguration("2ch", 1), catalog)
