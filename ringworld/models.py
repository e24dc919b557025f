"""Data classes for ring configuration, planned constants, and segments."""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import numpy as np

from .constants import (
    DEFAULT_SEGMENT_COUNT, DEFAULT_WIDTH_M, DEFAULT_RADIUS_M,
    DEFAULT_VERTS_ALONG_WIDTH, DEFAULT_VERTS_ALONG_EDGE,
    DEFAULT_MIN_SEGMENT_INDEX, DEFAULT_MAX_SEGMENT_INDEX, DEFAULT_MAX_LOD,
    DEFAULT_PROXIMITY_THRESHOLD, DEFAULT_TICK_INTERVAL,
    DEFAULT_TEXTURE_METERS_PER_PIXEL, DEFAULT_REGIONS,
)


@dataclass(frozen=True)
class TerrainRegion:
    """Colour band applied to normalised heights up to ``height``."""
    name: str
    height: float
    color: tuple


def default_regions() -> tuple:
    return tuple(TerrainRegion(n, h, c) for n, h, c in DEFAULT_REGIONS)


@dataclass(frozen=True)
class RingConfiguration:
    segment_count: int = DEFAULT_SEGMENT_COUNT
    width_in_meters: float = DEFAULT_WIDTH_M
    radius_in_meters: float = DEFAULT_RADIUS_M
    verts_along_width: int = DEFAULT_VERTS_ALONG_WIDTH
    verts_along_edge: int = DEFAULT_VERTS_ALONG_EDGE
    min_segment_index: int = DEFAULT_MIN_SEGMENT_INDEX
    max_segment_index: int = DEFAULT_MAX_SEGMENT_INDEX
    starting_lod: int = 0
    max_lod: int = DEFAULT_MAX_LOD
    target_lod: int = 0
    proximity_threshold: float = DEFAULT_PROXIMITY_THRESHOLD
    tick_interval: float = DEFAULT_TICK_INTERVAL

    # Forwarded to the terrain sampler, never interpreted here
    noise_scale: float = 250.0
    octaves: int = 4
    persistence: float = 0.5
    lacunarity: float = 2.0
    seed: int = 0
    height_multiplier: float = 1.0
    height_curve: Optional[Callable[[float], float]] = None
    mesh_height_multiplier: float = 40.0
    mesh_height_curve: Optional[Callable[[float], float]] = None

    save_texture_files: bool = False
    texture_meters_per_pixel: float = DEFAULT_TEXTURE_METERS_PER_PIXEL
    regions: tuple = field(default_factory=default_regions)

    auto_update: bool = False
    generate_on_play: bool = False

    def replace(self, **changes) -> "RingConfiguration":
        """Return a copy with *changes* applied."""
        return dataclasses.replace(self, **changes)

    def index_range(self) -> range:
        """Creation window clamped into ``[0, segment_count - 1]``."""
        lo = max(0, self.min_segment_index)
        hi = min(self.segment_count - 1, self.max_segment_index)
        return range(lo, hi + 1)


@dataclass(frozen=True)
class RingPlan:
    """Constants shared by every segment of one generation."""
    circumference: float
    uv_scale_x: float
    vertex_count: int
    index_count: int
    segment_angle: float  # degrees

    @property
    def triangle_count(self) -> int:
        return self.index_count // 3


@dataclass(frozen=True)
class SegmentPlacement:
    start_angle: float  # degrees
    span: float         # degrees
    center: tuple       # (x, y, z) on the undisplaced ring surface

    @property
    def end_angle(self) -> float:
        return self.start_angle + self.span


@dataclass
class Segment:
    index: int
    lod: int
    geometry: Any  # trimesh.Trimesh, owned
    placement: SegmentPlacement
    scene_handle: Any = None
    released: bool = False

    @property
    def name(self) -> str:
        return str(self.index)

    def bounds(self) -> np.ndarray:
        """Axis-aligned bounds as a (2, 3) array ``[min, max]``."""
        if self.geometry is None:
            raise RuntimeError(f"Segment {self.index} has been released")
        return np.asarray(self.geometry.bounds, dtype=np.float64)

    def distance_to(self, point) -> float:
        """Distance from *point* to the closest point of the segment bounds."""
        lo, hi = self.bounds()
        p = np.asarray(point, dtype=np.float64)
        closest = np.clip(p, lo, hi)
        return float(np.linalg.norm(p - closest))

    def release(self, scene_host=None) -> None:
        """End the lifetime of the geometry and its scene placeholder."""
        if self.released:
            return
        if scene_host is not None and self.scene_handle is not None:
            scene_host.destroy(self.scene_handle)
        self.scene_handle = None
        self.geometry = None
        self.released = True


@dataclass
class GenerationResult:
    created: list = field(default_factory=list)
    total: int = 0
    cancelled: bool = False

    @property
    def count(self) -> int:
        return len(self.created)
