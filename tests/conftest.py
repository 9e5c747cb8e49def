"""
Pytest configuration and fixtures for Gateway Planner tests.
"""

import os
import sys
from pathlib import Path

import pytest

# In-memory database for plan history; must be set before config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PERSIST_EXPORTS", "false")

# Add backend to path for imports
backend_path = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(backend_path))


@pytest.fixture
def sample_camera():
    """Dual-lens camera from the sizing example."""
    from models import CameraDefinition
    return CameraDefinition(
        name="Front Door",
        lens_count=2,
        streaming_resolution=2,
        frame_rate=10,
        recording_resolution=2,
        storage_days=30,
    )


@pytest.fixture
def sample_camera_dict():
    """Camera as posted by the camera form."""
    return {
        "name": "Loading Dock",
        "lensCount": 1,
        "streamingResolution": 4,
        "frameRate": 15,
        "recordingResolution": 4,
        "storageDays": 30,
    }


@pytest.fixture
def eight_channel_limits():
    from services.catalog import DEFAULT_GATEWAY_LIMITS
    return DEFAULT_GATEWAY_LIMITS["8ch"]


@pytest.fixture
def sixteen_channel_limits():
    from services.catalog import DEFAULT_GATEWAY_LIMITS
    return DEFAULT_GATEWAY_LIMITS["16ch"]


def make_stream(stream_id, camera_id, throughput=10.0, storage=0.1):
    """Build a bare stream with explicit demand."""
    from models import Stream
    return Stream(id=stream_id, camera_id=camera_id, throughput=throughput, storage=storage)


@pytest.fixture
def stream_factory():
    return make_stream
