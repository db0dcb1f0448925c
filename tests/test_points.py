import pytest

from blob3d.geom import Pt, ZERO
from blob3d.points import ControlPointStore, DEFAULT_COLOR


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self, store):
        self.calls += 1


@pytest.fixture
def store():
    return ControlPointStore()


def test_add_point_assigns_increasing_ids_and_defaults(store):
    a = store.add_point((0, 0, 0))
    b = store.add_point(Pt(1, 2, 3))
    assert (a, b) == (0, 1)
    cp = store.get_point(b)
    assert cp.position == Pt(1, 2, 3)
    assert cp.velocity == ZERO
    assert cp.color == DEFAULT_COLOR
    assert store.get_point_ids() == {0, 1}
    assert len(store) == 2


def test_add_point_with_id_rejects_collision_without_overwrite(store):
    assert store.add_point_with_id(10, (1, 1, 1))
    assert not store.add_point_with_id(10, (9, 9, 9))
    assert store.get_point_position(10) == Pt(1, 1, 1)
    # лічильник перескочив через 10
    assert store.add_point((0, 0, 0)) == 11


def test_add_point_with_negative_id_is_a_regular_point(store):
    assert store.add_point_with_id(-1, (0, 0, 0))
    assert store.has_point(-1)
    assert store.add_point((1, 1, 1)) == 0


def test_remove_point_missing_is_noop(store):
    counter = Counter()
    store.subscribe(counter)
    assert store.remove_point(42) is False
    assert counter.calls == 0
    pid = store.add_point((0, 0, 0))
    assert store.remove_point(pid) is True
    assert not store.has_point(pid)
    assert store.get_point_position(pid) is None


def test_setters_update_in_place_and_ignore_unknown_ids(store):
    pid = store.add_point((0, 0, 0))
    store.set_point_position(pid, (1, 0, 0))
    assert store.get_point_position(pid) == Pt(1, 0, 0)
    store.set_point_state(pid, (2, 0, 0), (0, 1, 0))
    cp = store.get_point(pid)
    assert cp.position == Pt(2, 0, 0)
    assert cp.velocity == Pt(0, 1, 0)
    store.set_point_color(pid, (0.1, 0.2, 0.3, 0.4))
    assert store.get_point(pid).color == (0.1, 0.2, 0.3, 0.4)

    version = store.version
    store.set_point_position(999, (5, 5, 5))
    store.set_point_state(999, (5, 5, 5), (1, 1, 1))
    store.set_point_color(999, (1, 1, 1, 1))
    assert store.version == version
    assert not store.has_point(999)


def test_every_mutation_notifies_once(store):
    counter = Counter()
    store.subscribe(counter)
    pid = store.add_point((0, 0, 0))
    store.set_point_position(pid, (1, 1, 1))
    store.set_point_state(pid, (1, 1, 1), (0, 0, 0))
    store.set_point_color(pid, (1, 0, 0, 1))
    store.remove_point(pid)
    assert counter.calls == 5


def test_bulk_operations_notify_exactly_once(store):
    counter = Counter()
    store.subscribe(counter)
    ids = store.add_points([(i, 0, 0) for i in range(100)])
    assert ids == list(range(100))
    assert counter.calls == 1

    store.set_point_positions({i: (i, 1, 0) for i in ids})
    assert counter.calls == 2
    assert store.get_point_position(50) == Pt(50, 1, 0)


def test_nested_batch_emits_single_notification(store):
    counter = Counter()
    store.subscribe(counter)
    with store.batch():
        store.add_point((0, 0, 0))
        with store.batch():
            store.add_points([(1, 0, 0), (2, 0, 0)])
        assert counter.calls == 0
    assert counter.calls == 1


def test_empty_batch_does_not_notify(store):
    counter = Counter()
    store.subscribe(counter)
    with store.batch():
        store.remove_point(123)
    assert counter.calls == 0


def test_clear_keeps_counter_and_notifies_once(store):
    store.add_points([(0, 0, 0), (1, 0, 0), (2, 0, 0)])
    counter = Counter()
    store.subscribe(counter)
    store.clear()
    assert len(store) == 0
    assert counter.calls == 1
    assert store.add_point((0, 0, 0)) == 3


def test_arena_reuses_freed_slots_with_new_generation(store):
    a = store.add_point((0, 0, 0))
    gen_before = store.generation(a)
    store.remove_point(a)
    assert store.generation(a) is None
    b = store.add_point((1, 1, 1))
    assert store.generation(b) == gen_before + 1


def test_snapshot_is_sorted_and_immutable(store):
    store.add_point_with_id(5, (5, 0, 0))
    store.add_point_with_id(2, (2, 0, 0))
    store.add_point_with_id(9, (9, 0, 0))
    snap = store.snapshot()
    assert snap.ids() == [2, 5, 9]
    store.set_point_position(5, (0, 0, 0))
    assert snap.positions()[5] == Pt(5, 0, 0)
    assert store.snapshot().version > snap.version


def test_unsubscribe_stops_notifications(store):
    counter = Counter()
    store.subscribe(counter)
    store.unsubscribe(counter)
    store.add_point((0, 0, 0))
    assert counter.calls == 0
