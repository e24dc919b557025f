"""Proximity-driven LOD upgrades.

Once per tick the scheduler finds the live segment nearest the observer
that has not been upgraded yet this generation, and, if it lies within the
proximity threshold, rebuilds it at the target LOD. At most one segment is
upgraded per tick, and an upgraded index is not looked at again until the
next full generation resets ``ProximityState``.
"""

import logging
import math
from typing import Callable, Optional

from .constants import DEFAULT_PROXIMITY_THRESHOLD, DEFAULT_TICK_INTERVAL
from .models import Segment
from .registry import SegmentRegistry

logger = logging.getLogger(__name__)


class ProximityState:
    """Indices already upgraded in the current generation epoch."""

    def __init__(self) -> None:
        self._upgraded: set = set()

    def mark(self, index: int) -> None:
        self._upgraded.add(index)

    def reset(self) -> None:
        self._upgraded.clear()

    @property
    def upgraded(self) -> frozenset:
        return frozenset(self._upgraded)

    def __contains__(self, index) -> bool:
        return index in self._upgraded

    def __len__(self) -> int:
        return len(self._upgraded)


class ProximityLODScheduler:
    """
    registry: the live segment registry.
    rebuild: ``rebuild(index, lod) -> Segment``, builds a replacement.
    state: shared ``ProximityState``, reset by full generation.
    observer: ``(x, y, z)``, a zero-argument callable returning one, or None.
    """

    def __init__(self, registry: SegmentRegistry,
                 rebuild: Callable[[int, int], Segment],
                 state: Optional[ProximityState] = None,
                 proximity_threshold: float = DEFAULT_PROXIMITY_THRESHOLD,
                 target_lod: int = 0,
                 interval: float = DEFAULT_TICK_INTERVAL,
                 observer=None):
        self.registry = registry
        self.rebuild = rebuild
        self.state = state if state is not None else ProximityState()
        self.proximity_threshold = proximity_threshold
        self.target_lod = target_lod
        self.interval = interval
        self.observer = observer
        self.active = False
        self._last_tick: Optional[float] = None
        self._ticking = False

    def start(self) -> None:
        self.active = True
        self._last_tick = None

    def stop(self) -> None:
        self.active = False

    def observer_position(self):
        observer = self.observer
        if callable(observer):
            observer = observer()
        return observer

    def update(self, now: float) -> Optional[int]:
        """Run a tick if the scheduler is active and the interval elapsed."""
        if not self.active:
            return None
        if self._last_tick is not None and now - self._last_tick < self.interval:
            return None
        self._last_tick = now
        return self.tick()

    def nearest_candidate(self, position):
        """Return ``(index, distance)`` of the nearest eligible segment
        within the threshold, or None. Ties go to the lowest index."""
        best_index = None
        best_distance = math.inf
        for index in sorted(self.registry.indices()):
            if index in self.state:
                continue
            segment = self.registry.get(index)
            distance = segment.distance_to(position)
            if distance < best_distance and distance <= self.proximity_threshold:
                best_index = index
                best_distance = distance
        if best_index is None:
            return None
        return best_index, best_distance

    def tick(self) -> Optional[int]:
        """Upgrade at most one segment. Returns its index, or None."""
        if self._ticking:
            logger.debug("Proximity tick already running, skipping")
            return None

        position = self.observer_position()
        if position is None:
            return None

        self._ticking = True
        try:
            found = self.nearest_candidate(position)
            if found is None:
                return None
            index, distance = found

            self.state.mark(index)
            logger.info(f"Closest segment is {index} with a distance of "
                        f"{distance:.1f}")
            replacement = self.rebuild(index, self.target_lod)
            self.registry.put(index, replacement)
            return index
        finally:
            self._ticking = False
