"""Authoritative index -> live segment mapping."""

import logging
from typing import Optional

from .models import Segment

logger = logging.getLogger(__name__)


class SegmentRegistry:
    """Owns every live segment, at most one per ring index.

    Only the lifecycle controller and the proximity scheduler mutate the
    registry, and never concurrently.
    """

    def __init__(self, scene_host=None):
        self.scene_host = scene_host
        self._segments: dict[int, Segment] = {}

    def put(self, index: int, segment: Segment) -> None:
        """Insert or replace the segment at *index*.

        The previous segment is released after the new one is stored.
        """
        if segment.index != index:
            raise ValueError(
                f"Segment index {segment.index} does not match key {index}")
        previous = self._segments.get(index)
        self._segments[index] = segment
        if previous is not None and previous is not segment:
            previous.release(self.scene_host)
            logger.debug(f"Replaced segment {index} "
                         f"(lod {previous.lod} -> {segment.lod})")

    def get(self, index: int) -> Optional[Segment]:
        return self._segments.get(index)

    def indices(self) -> set:
        return set(self._segments)

    def clear(self) -> None:
        """Release every held segment and empty the registry."""
        if self._segments:
            logger.info(f"Releasing {len(self._segments)} segments")
        segments, self._segments = self._segments, {}
        for segment in segments.values():
            segment.release(self.scene_host)

    def __len__(self) -> int:
        return len(self._segments)

    def __contains__(self, index) -> bool:
        return index in self._segments

    def __iter__(self):
        return iter(sorted(self._segments.values(), key=lambda s: s.index))
