# tests/conftest.py

import numpy as np
import pytest

from ringworld.controller import RingLifecycleController
from ringworld.models import RingConfiguration
from ringworld.scene import InMemorySceneHost


class StubSampler(object):
    """Constant-height sampler that records every call."""

    def __init__(self, height=0.0):
        self.height = height
        self.calls = []

    def sample(self, world_x, world_z, lod):
        self.calls.append((world_x, world_z, lod))
        return self.height


class ScriptedProgress(object):
    """Requests cancellation once ``cancel_at`` segments exist."""

    def __init__(self, cancel_at=None):
        self.cancel_at = cancel_at
        self.reports = []

    def report(self, current, total):
        self.reports.append((current, total))
        return self.cancel_at is not None and current >= self.cancel_at


class BoxGeometry(object):
    """Stand-in geometry exposing only axis-aligned bounds."""

    def __init__(self, lo, hi):
        self.bounds = np.array([lo, hi], dtype=np.float64)


@pytest.fixture
def small_config():
    return RingConfiguration(
        segment_count=4,
        width_in_meters=10.0,
        radius_in_meters=100.0,
        verts_along_width=2,
        verts_along_edge=2,
        mesh_height_multiplier=0.0,
        proximity_threshold=10.0,
    )


@pytest.fixture
def stub_sampler():
    return StubSampler()


@pytest.fixture
def scene_host():
    return InMemorySceneHost()


@pytest.fixture
def make_controller(tmp_path, stub_sampler, scene_host):
    def _make(config, **kwargs):
        kwargs.setdefault("sampler", stub_sampler)
        kwargs.setdefault("scene_host", scene_host)
        kwargs.setdefault("texture_dir", tmp_path / "textures")
        return RingLifecycleController(config, **kwargs)
    return _make
