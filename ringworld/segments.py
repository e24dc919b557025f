"""Segment mesh generation.

A segment is one angular slice of the ring's inner surface. The ring axis
is world Z; angle 0 sits at the bottom of the ring (``y = -radius``) and
angles grow towards +X. Terrain height displaces vertices towards the axis
so the walkable surface faces inward.
"""

import math
import logging

import numpy as np
import trimesh

from .models import RingConfiguration, RingPlan, Segment, SegmentPlacement
from .terrain import sample_grid

logger = logging.getLogger(__name__)


def ring_point(angle_rad, radius, z):
    """Point on a ring of *radius* around the Z axis."""
    return (radius * np.sin(angle_rad), -radius * np.cos(angle_rad), z)


def build_grid_faces(rows: int, cols: int) -> np.ndarray:
    """Two triangles per grid cell for a ``rows x cols`` vertex grid.

    Vertex ``(r, c)`` has id ``r * cols + c``. Wound so normals face the
    ring axis.
    """
    r_g, c_g = np.meshgrid(np.arange(rows - 1), np.arange(cols - 1),
                           indexing='ij')
    r_f = r_g.ravel()
    c_f = c_g.ravel()

    v00 = r_f * cols + c_f
    v01 = r_f * cols + (c_f + 1)
    v10 = (r_f + 1) * cols + c_f
    v11 = (r_f + 1) * cols + (c_f + 1)

    tri1 = np.column_stack([v00, v10, v01])
    tri2 = np.column_stack([v01, v10, v11])
    # Interleave so each cell's six indices are contiguous
    return np.stack([tri1, tri2], axis=1).reshape(-1, 3)


class SegmentFactory:
    """Build renderable segments; heights come from *sampler*."""

    def __init__(self, sampler):
        self.sampler = sampler

    def placement_for(self, index: int, config: RingConfiguration,
                      plan: RingPlan) -> SegmentPlacement:
        span = plan.segment_angle
        start = index * span
        mid = math.radians(start + span / 2.0)
        cx, cy, cz = ring_point(mid, config.radius_in_meters, 0.0)
        return SegmentPlacement(start_angle=start, span=span,
                                center=(float(cx), float(cy), float(cz)))

    def _mesh_heights(self, heights: np.ndarray,
                      config: RingConfiguration) -> np.ndarray:
        if config.mesh_height_curve is not None:
            heights = np.vectorize(config.mesh_height_curve,
                                   otypes=[float])(heights)
        return heights * config.mesh_height_multiplier

    def create_segment(self, index: int, lod: int, config: RingConfiguration,
                       plan: RingPlan) -> Segment:
        """Build the mesh for ring slice *index* at *lod*.

        *index* must already be inside the clamped creation window.
        """
        placement = self.placement_for(index, config, plan)

        rows = config.verts_along_width + 1
        cols = config.verts_along_edge
        radius = config.radius_in_meters
        width = config.width_in_meters

        angles = np.radians(np.linspace(placement.start_angle,
                                        placement.end_angle, cols))
        arc = angles * radius                            # unrolled world X
        zs = np.linspace(-width / 2.0, width / 2.0, rows)  # world Z

        ang_2d = np.broadcast_to(angles, (rows, cols))
        arc_2d = np.broadcast_to(arc, (rows, cols))
        z_2d = np.broadcast_to(zs[:, None], (rows, cols))
        heights = self._mesh_heights(
            sample_grid(self.sampler, arc_2d, z_2d, lod), config)

        x, y, z = ring_point(ang_2d, radius - heights, z_2d)
        vertices = np.column_stack([x.ravel(), y.ravel(), z.ravel()])

        # U runs around the ring, V across its width
        u = np.broadcast_to(arc / plan.circumference * plan.uv_scale_x,
                            (rows, cols))
        v = np.broadcast_to(np.linspace(0.0, 1.0, rows)[:, None],
                            (rows, cols))
        uv = np.column_stack([u.ravel(), v.ravel()])

        faces = build_grid_faces(rows, cols)

        if len(vertices) != plan.vertex_count or faces.size != plan.index_count:
            raise ValueError(
                f"Segment {index}: built {len(vertices)} verts / "
                f"{faces.size} indices, plan expects {plan.vertex_count} / "
                f"{plan.index_count}")

        mesh = trimesh.Trimesh(vertices=vertices, faces=faces, process=False)
        mesh.visual = trimesh.visual.TextureVisuals(uv=uv)

        logger.debug(f"Built segment {index} (lod {lod}): "
                     f"{len(vertices)} verts, {len(faces)} faces")
        return Segment(index=index, lod=lod, geometry=mesh, placement=placement)
