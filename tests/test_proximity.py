from ringworld.models import Segment, SegmentPlacement
from ringworld.proximity import ProximityLODScheduler, ProximityState
from ringworld.registry import SegmentRegistry

from conftest import BoxGeometry

_PLACEMENT = SegmentPlacement(0.0, 90.0, (0.0, 0.0, 0.0))


def _box_segment(index, lo, hi, lod=3):
    return Segment(index=index, lod=lod, geometry=BoxGeometry(lo, hi),
                   placement=_PLACEMENT)


def _unit_boxes_along_x(count):
    """Unit cubes at x = 0, 10, 20, ..."""
    registry = SegmentRegistry()
    for i in range(count):
        registry.put(i, _box_segment(i, (10 * i, 0, 0), (10 * i + 1, 1, 1)))
    return registry


def _rebuilder(calls):
    def rebuild(index, lod):
        calls.append((index, lod))
        return _box_segment(index, (10 * index, 0, 0),
                            (10 * index + 1, 1, 1), lod=lod)
    return rebuild


def test_missing_observer_is_a_no_op():
    registry = _unit_boxes_along_x(3)
    calls = []
    scheduler = ProximityLODScheduler(registry, _rebuilder(calls),
                                      proximity_threshold=100.0)

    assert scheduler.tick() is None
    assert calls == []
    assert len(scheduler.state) == 0


def test_nearest_segment_within_threshold_is_upgraded_once():
    registry = _unit_boxes_along_x(3)
    calls = []
    scheduler = ProximityLODScheduler(registry, _rebuilder(calls),
                                      proximity_threshold=3.0,
                                      observer=(12.0, 0.5, 0.5))

    assert scheduler.tick() == 1
    assert calls == [(1, 0)]
    assert registry.get(1).lod == 0
    assert 1 in scheduler.state

    assert scheduler.tick() is None
    assert calls == [(1, 0)]


def test_at_most_one_upgrade_per_tick():
    registry = _unit_boxes_along_x(3)
    calls = []
    scheduler = ProximityLODScheduler(registry, _rebuilder(calls),
                                      proximity_threshold=1000.0,
                                      observer=(0.5, 0.5, 0.5))

    assert scheduler.tick() == 0
    assert scheduler.tick() == 1
    assert scheduler.tick() == 2
    assert scheduler.tick() is None
    assert [i for i, _ in calls] == [0, 1, 2]


def test_equal_distance_picks_lowest_index():
    registry = SegmentRegistry()
    registry.put(7, _box_segment(7, (2, 0, 0), (3, 1, 1)))
    registry.put(4, _box_segment(4, (-3, 0, 0), (-2, 1, 1)))
    calls = []
    scheduler = ProximityLODScheduler(registry, _rebuilder(calls),
                                      proximity_threshold=5.0,
                                      observer=(0.0, 0.5, 0.5))

    assert scheduler.tick() == 4


def test_observer_beyond_threshold_upgrades_nothing():
    registry = _unit_boxes_along_x(3)
    calls = []
    scheduler = ProximityLODScheduler(registry, _rebuilder(calls),
                                      proximity_threshold=5.0,
                                      observer=(100.0, 100.0, 100.0))

    assert scheduler.tick() is None
    assert calls == []
    assert all(registry.get(i).lod == 3 for i in range(3))


def test_distance_equal_to_threshold_is_eligible():
    registry = _unit_boxes_along_x(1)
    scheduler = ProximityLODScheduler(registry, _rebuilder([]),
                                      proximity_threshold=4.0,
                                      observer=(5.0, 0.5, 0.5))
    assert scheduler.tick() == 0


def test_observer_callable_is_polled():
    registry = _unit_boxes_along_x(2)
    positions = [None, (10.5, 0.5, 0.5)]
    scheduler = ProximityLODScheduler(registry, _rebuilder([]),
                                      proximity_threshold=1.0,
                                      observer=lambda: positions.pop(0))

    assert scheduler.tick() is None
    assert scheduler.tick() == 1


def test_update_runs_on_fixed_cadence():
    polls = []

    def observer():
        polls.append(1)
        return None

    scheduler = ProximityLODScheduler(SegmentRegistry(), _rebuilder([]),
                                      interval=1.0, observer=observer)
    scheduler.update(0.0)
    assert polls == []

    scheduler.start()
    for now in (0.0, 0.4, 0.9, 1.0, 1.5, 2.0):
        scheduler.update(now)
    assert len(polls) == 3

    scheduler.stop()
    scheduler.update(10.0)
    assert len(polls) == 3


def test_overlapping_tick_is_skipped():
    registry = _unit_boxes_along_x(2)
    nested = []
    scheduler = None

    def rebuild(index, lod):
        nested.append(scheduler.tick())
        return _box_segment(index, (10 * index, 0, 0),
                            (10 * index + 1, 1, 1), lod=lod)

    scheduler = ProximityLODScheduler(registry, rebuild,
                                      proximity_threshold=100.0,
                                      observer=(0.5, 0.5, 0.5))
    assert scheduler.tick() == 0
    assert nested == [None]
    assert scheduler.state.upgraded == frozenset({0})


def test_state_reset_allows_reupgrade():
    state = ProximityState()
    registry = _unit_boxes_along_x(1)
    scheduler = ProximityLODScheduler(registry, _rebuilder([]), state=state,
                                      proximity_threshold=1.0,
                                      observer=(0.5, 0.5, 0.5))
    assert scheduler.tick() == 0
    assert scheduler.tick() is None

    state.reset()
    assert scheduler.tick() == 0
