from boxweaver.geometry import boxes_overlap
from boxweaver.models import BoxSpec, ItemSpec, Orientation
from boxweaver.packing.first_fit import Bin, generate_candidate_points


def cube(name, size=5.0, weight=1.0):
    return ItemSpec(name=name, width=size, height=size, depth=size, weight=weight)


def assert_within_box(box, placements):
    for p in placements:
        x1, y1, z1, x2, y2, z2 = p.bounds
        assert x1 >= 0 and y1 >= 0 and z1 >= 0
        assert x2 <= box.width
        assert y2 <= box.height
        assert z2 <= box.depth


def assert_no_overlaps(placements):
    bounds = [p.bounds for p in placements]
    for i in range(len(bounds)):
        for j in range(i + 1, len(bounds)):
            assert not boxes_overlap(bounds[i], bounds[j])


def test_cubes_fill_lowest_then_back_then_left():
    box = BoxSpec(label="Cube", width=10, height=10, depth=10, max_weight=100)
    trial = Bin(box)

    for i in range(8):
        assert trial.add_item(cube(f"C{i}")) is True

    positions = [(p.position.x, p.position.y, p.position.z) for p in trial.placed]
    assert positions == [
        (0, 0, 0),
        (5, 0, 0),
        (0, 0, 5),
        (5, 0, 5),
        (0, 5, 0),
        (5, 5, 0),
        (0, 5, 5),
        (5, 5, 5),
    ]
    assert trial.add_item(cube("C8")) is False

    assert_within_box(box, trial.placed)
    assert_no_overlaps(trial.placed)


def test_first_orientation_in_index_order_wins():
    item = ItemSpec(name="Slab", width=4, height=2, depth=1, weight=1)

    upright = Bin(BoxSpec(label="A", width=4, height=2, depth=1, max_weight=10))
    assert upright.add_item(item) is True
    assert upright.placed[0].orientation is Orientation.WHD

    # WHD and WDH are too wide; HWD is the first that fits
    turned = Bin(BoxSpec(label="B", width=2, height=4, depth=1, max_weight=10))
    assert turned.add_item(item) is True
    assert turned.placed[0].orientation is Orientation.HWD
    assert turned.placed[0].dims == (2, 4, 1)


def test_later_orientation_used_once_first_has_no_room():
    # 8x10x12 items in a 24x18x18 box: three upright, then the fourth lies on its side
    box = BoxSpec(label="Large", width=24, height=18, depth=18, max_weight=50)
    item = ItemSpec(name="ITEM001", width=8, height=10, depth=12, weight=2.5)
    trial = Bin(box)

    for _ in range(4):
        assert trial.add_item(item) is True

    assert [p.orientation for p in trial.placed] == [Orientation.WHD] * 3 + [Orientation.HWD]
    fourth = trial.placed[3].position
    assert (fourth.x, fourth.y, fourth.z) == (0, 10, 0)


def test_weight_limit_blocks_second_item():
    box = BoxSpec(label="Heavy", width=10, height=10, depth=10, max_weight=1000)
    trial = Bin(box)

    assert trial.add_item(cube("A", size=2, weight=600)) is True
    assert trial.add_item(cube("B", size=2, weight=600)) is False

    assert [p.item.name for p in trial.placed] == ["A"]
    assert trial.current_weight == 600


def test_weight_exactly_at_limit_is_allowed():
    trial = Bin(BoxSpec(label="Exact", width=10, height=10, depth=10, max_weight=2))

    assert trial.add_item(cube("A", size=2, weight=1)) is True
    assert trial.add_item(cube("B", size=2, weight=1)) is True
    assert trial.add_item(cube("C", size=2, weight=1)) is False


def test_try_place_does_not_mutate():
    trial = Bin(BoxSpec(label="Box", width=10, height=10, depth=10, max_weight=100))

    placed = trial.try_place(cube("A"))

    assert placed is not None
    assert trial.placed == []
    assert trial.current_weight == 0


def test_failed_add_leaves_bin_unchanged():
    trial = Bin(BoxSpec(label="Box", width=10, height=10, depth=10, max_weight=100))
    assert trial.add_item(cube("A")) is True

    assert trial.add_item(cube("Huge", size=11)) is False

    assert len(trial.placed) == 1
    assert trial.current_weight == 1


def test_reset_matches_fresh_bin():
    box = BoxSpec(label="Box", width=10, height=10, depth=10, max_weight=100)
    used = Bin(box)
    for i in range(3):
        used.add_item(cube(f"C{i}"))

    used.reset()
    used.reset()
    fresh = Bin(box)

    assert used.placed == []
    assert used.current_weight == 0
    for i in range(8):
        a = used.try_place(cube(f"C{i}"))
        b = fresh.try_place(cube(f"C{i}"))
        assert a == b
        used.add_item(cube(f"C{i}"))
        fresh.add_item(cube(f"C{i}"))


def test_degenerate_box_accepts_nothing():
    trial = Bin(BoxSpec(label="Worn", width=-1, height=5, depth=5, max_weight=10))

    assert trial.add_item(cube("A", size=1)) is False


def test_candidate_points_from_placements():
    trial = Bin(BoxSpec(label="Box", width=10, height=10, depth=10, max_weight=100))
    trial.add_item(ItemSpec(name="A", width=2, height=3, depth=4, weight=1))

    assert generate_candidate_points(trial.placed) == [
        (0.0, 0.0, 0.0),
        (2.0, 0.0, 0.0),
        (0.0, 3.0, 0.0),
        (0.0, 0.0, 4.0),
    ]
