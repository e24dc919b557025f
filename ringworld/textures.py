"""Per-segment texture export and cleanup of previous exports."""

import math
import logging
import pathlib

import numpy as np
from PIL import Image

from .constants import MAX_TEXTURE_EDGE_PX
from .terrain import sample_grid

logger = logging.getLogger(__name__)


def delete_previous_texture_files(directory) -> int:
    """Delete every exported ``*.png`` in *directory*.

    Failures are logged per file and never raised. Returns the number of
    files deleted.
    """
    directory = pathlib.Path(directory)
    if not directory.is_dir():
        logger.warning(f"Directory does not exist: {directory}")
        return 0

    deleted = 0
    for path in sorted(directory.glob("*.png")):
        try:
            path.unlink()
            deleted += 1
            logger.debug(f"Deleted file: {path}")
        except OSError as e:
            logger.error(f"Failed to delete file: {path} Error: {e}")
    if deleted:
        logger.info(f"Deleted {deleted} previous texture files")
    return deleted


def colorize(heights, regions) -> np.ndarray:
    """Map normalised heights to RGB using the first region whose upper
    bound is not exceeded; heights above every bound use the last region."""
    heights = np.asarray(heights, dtype=np.float64)
    rgb = np.zeros(heights.shape + (3,), dtype=np.uint8)
    if not regions:
        gray = (np.clip(heights, 0.0, 1.0) * 255).astype(np.uint8)
        rgb[...] = gray[..., None]
        return rgb

    assigned = np.zeros(heights.shape, dtype=bool)
    for region in sorted(regions, key=lambda r: r.height):
        mask = ~assigned & (heights <= region.height)
        rgb[mask] = region.color
        assigned |= mask
    rgb[~assigned] = max(regions, key=lambda r: r.height).color
    return rgb


def texture_size(segment, config, plan) -> tuple:
    """(width_px, height_px): U runs along the arc, V across the ring."""
    arc_len = plan.circumference * segment.placement.span / 360.0
    mpp = config.texture_meters_per_pixel
    w = min(MAX_TEXTURE_EDGE_PX, max(1, math.ceil(arc_len / mpp)))
    h = min(MAX_TEXTURE_EDGE_PX, max(1, math.ceil(config.width_in_meters / mpp)))
    return w, h


def export_segment_texture(segment, config, plan, sampler,
                           directory) -> pathlib.Path:
    """Rasterise the segment's height field into a region-coloured PNG."""
    directory = pathlib.Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    w, h = texture_size(segment, config, plan)
    radius = config.radius_in_meters
    start = math.radians(segment.placement.start_angle) * radius
    end = math.radians(segment.placement.end_angle) * radius
    half = config.width_in_meters / 2.0

    xs = np.linspace(start, end, w)
    zs = np.linspace(-half, half, h)
    gx, gz = np.meshgrid(xs, zs)
    heights = sample_grid(sampler, gx, gz, segment.lod)

    image = Image.fromarray(colorize(heights, config.regions))
    path = directory / f"segment_{segment.index:03d}.png"
    image.save(path)
    logger.debug(f"Saved texture {path.name} ({w}x{h})")
    return path
