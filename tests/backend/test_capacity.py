"""
Tests for the capacity validator.
"""

import pytest


class TestValidateCapacity:
    """Tests for validate_capacity."""

    def test_empty_gateway(self, eight_channel_limits):
        from services.capacity import validate_capacity

        result = validate_capacity([], eight_channel_limits)

        assert result.streams == 0
        assert result.throughput == 0
        assert result.storage == 0
        assert result.peak_percent == 0
        assert result.fits is True

    def test_percentages(self, eight_channel_limits, stream_factory):
        from services.capacity import validate_capacity

        streams = [stream_factory(f"{i}-0", f"camera-{i}", throughput=40, storage=0.75) for i in range(2)]
        result = validate_capacity(streams, eight_channel_limits)

        assert result.streams_percent == pytest.approx(25.0)
        assert result.throughput_percent == pytest.approx(25.0)
        assert result.storage_percent == pytest.approx(25.0)
        assert result.fits is True

    def test_storage_compared_in_terabytes(self, eight_channel_limits, stream_factory):
        """6 TB is the 8ch storage limit; 6.5 TB must not fit"""
        from services.capacity import validate_capacity

        at_limit = validate_capacity([stream_factory("0-0", "camera-0", storage=6.0)], eight_channel_limits)
        over = validate_capacity([stream_factory("0-0", "camera-0", storage=6.5)], eight_channel_limits)

        assert at_limit.fits is True
        assert at_limit.storage_percent == pytest.approx(100.0)
        assert over.fits is False
        assert over.storage_percent == pytest.approx(108.333, rel=1e-3)

    def test_stream_count_limit(self, eight_channel_limits, stream_factory):
        from services.capacity import validate_capacity

        streams = [stream_factory(f"{i}-0", f"camera-{i}", throughput=1, storage=0.01) for i in range(9)]

        assert validate_capacity(streams[:8], eight_channel_limits).fits is True
        assert validate_capacity(streams, eight_channel_limits).fits is False

    def test_throughput_limit(self, sixteen_channel_limits, stream_factory):
        from services.capacity import validate_capacity

        streams = [stream_factory(f"{i}-0", f"camera-{i}", throughput=160, storage=0.1) for i in range(5)]

        assert validate_capacity(streams[:4], sixteen_channel_limits).fits is True
        result = validate_capacity(streams, sixteen_channel_limits)
        assert result.fits is False
        assert result.throughput_percent == pytest.approx(125.0)

    def test_peak_percent(self, sixteen_channel_limits, stream_factory):
        from services.capacity import validate_capacity

        result = validate_capacity([stream_factory("0-0", "camera-0", throughput=320, storage=1.2)], sixteen_channel_limits)

        assert result.peak_percent == pytest.approx(50.0)

    def test_to_dict(self, eight_channel_limits, stream_factory):
        from services.capacity import validate_capacity

        data = validate_capacity([stream_factory("0-0", "camera-0")], eight_channel_limits).to_dict()

        assert set(data) == {
            "streams", "streamsPercent", "throughput", "throughputPercent",
            "storage", "storagePercent", "fits",
        }
