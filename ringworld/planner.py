"""Ring geometry planning: validation and per-generation constants."""

import math
import logging

from .errors import InvalidConfiguration
from .models import RingConfiguration, RingPlan

logger = logging.getLogger(__name__)


def _check_dimensions(config: RingConfiguration) -> None:
    if config.segment_count < 1:
        raise InvalidConfiguration(
            f"segment_count must be >= 1, got {config.segment_count}")
    if config.width_in_meters <= 0:
        raise InvalidConfiguration(
            f"width_in_meters must be positive, got {config.width_in_meters}")
    if config.radius_in_meters <= 0:
        raise InvalidConfiguration(
            f"radius_in_meters must be positive, got {config.radius_in_meters}")
    if config.verts_along_width < 1:
        raise InvalidConfiguration(
            f"verts_along_width must be >= 1, got {config.verts_along_width}")
    if config.verts_along_edge < 2:
        raise InvalidConfiguration(
            f"verts_along_edge must be >= 2, got {config.verts_along_edge}")


def plan(config: RingConfiguration) -> RingPlan:
    """Compute the constants every segment of a generation shares.

    Raises ``InvalidConfiguration`` for a ring that cannot exist.
    """
    _check_dimensions(config)

    circumference = 2 * math.pi * config.radius_in_meters
    return RingPlan(
        circumference=circumference,
        uv_scale_x=circumference / config.width_in_meters,
        vertex_count=(config.verts_along_width + 1) * config.verts_along_edge,
        index_count=config.verts_along_width * (config.verts_along_edge - 1) * 6,
        segment_angle=360.0 / config.segment_count,
    )


def validate(config: RingConfiguration) -> RingConfiguration:
    """Return a copy of *config* with every clampable field clamped.

    Hosts call this after editing the configuration and before
    ``generate()``. Dimension errors are not clampable and raise.
    """
    _check_dimensions(config)
    if config.tick_interval <= 0:
        raise InvalidConfiguration(
            f"tick_interval must be positive, got {config.tick_interval}")
    if config.texture_meters_per_pixel <= 0:
        raise InvalidConfiguration(
            "texture_meters_per_pixel must be positive, "
            f"got {config.texture_meters_per_pixel}")

    max_lod = max(0, config.max_lod)
    changes = {
        "max_lod": max_lod,
        "starting_lod": min(max(0, config.starting_lod), max_lod),
        "target_lod": min(max(0, config.target_lod), max_lod),
        "min_segment_index": max(0, config.min_segment_index),
        "max_segment_index": min(config.segment_count - 1,
                                 config.max_segment_index),
        "persistence": min(max(0.0, config.persistence), 1.0),
        "octaves": max(1, config.octaves),
        "proximity_threshold": max(0.0, config.proximity_threshold),
    }
    clamped = {k: v for k, v in changes.items() if getattr(config, k) != v}
    if clamped:
        logger.info(f"Clamped configuration fields: {sorted(clamped)}")
        return config.replace(**clamped)
    return config
