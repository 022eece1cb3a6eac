from __future__ import annotations

from twister.core.pressed import PressedSetTracker, RolloverObserver


def test_redundant_events_queue_nothing() -> None:
    t = PressedSetTracker()

    assert t.apply("A", True) is True
    assert t.apply("A", True) is False
    assert t.apply("B", False) is False

    changes = list(t.drain())
    assert len(changes) == 1
    assert changes[0].key == "A"
    assert changes[0].is_down is True
    assert changes[0].snapshot == frozenset({"A"})


def test_each_change_carries_its_own_snapshot() -> None:
    t = PressedSetTracker(["A"])
    t.apply("B", True)
    t.apply("A", False)

    snapshots = [c.snapshot for c in t.drain()]
    assert snapshots == [frozenset({"A", "B"}), frozenset({"B"})]
    assert t.snapshot == frozenset({"B"})
    assert list(t.drain()) == []


def test_rollover_peak_is_running_max() -> None:
    t = PressedSetTracker()
    obs = RolloverObserver()
    seen: list[int] = []

    for key, down in [("A", True), ("B", True), ("C", True), ("B", False), ("D", True), ("A", False), ("C", False)]:
        t.apply(key, down)
        for change in t.drain():
            obs.observe(change)
            seen.append(obs.peak)

    assert seen == sorted(seen)
    assert obs.peak == 3
    assert obs.current == 1


def test_rollover_reset_keeps_what_is_still_held() -> None:
    obs = RolloverObserver(current=2, peak=6)
    obs.reset()
    assert obs.peak == 2

    idle = RolloverObserver(peak=4)
    idle.reset()
    assert idle.peak == 0
