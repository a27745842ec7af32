import unittest

from regionkit.exceptions import NonDeterministicError
from regionkit.TS.analysis import (
    check_deterministic,
    find_nondeterminism,
    find_persistence_violation,
    is_deterministic,
    is_persistent,
    is_reversible,
    is_totally_reachable,
    reachable_part,
)
from regionkit.TS.transition_system import TransitionSystem


def diamond() -> TransitionSystem:
    return TransitionSystem.from_arcs(
        [("s0", "s1", "a"), ("s0", "s2", "b"), ("s1", "s3", "b"), ("s2", "s3", "a")],
        initial="s0",
    )


class TestDeterminism(unittest.TestCase):
    def test_forward(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("s", "u", "a")], initial="s")
        self.assertFalse(is_deterministic(ts))
        self.assertEqual(find_nondeterminism(ts), ("s", "a"))
        with self.assertRaises(NonDeterministicError) as ctx:
            check_deterministic(ts)
        self.assertEqual(ctx.exception.state, "s")
        self.assertEqual(ctx.exception.label, "a")
        self.assertTrue(ctx.exception.forward)

    def test_backward(self):
        ts = TransitionSystem.from_arcs([("s", "u", "a"), ("t", "u", "a"), ("s", "t", "b")], initial="s")
        self.assertTrue(is_deterministic(ts))
        self.assertFalse(is_deterministic(ts, forward=False))
        with self.assertRaises(NonDeterministicError) as ctx:
            check_deterministic(ts, forward=False)
        self.assertFalse(ctx.exception.forward)

    def test_diamond_is_deterministic_both_ways(self):
        ts = diamond()
        self.assertTrue(is_deterministic(ts))
        self.assertTrue(is_deterministic(ts, forward=False))


class TestReachability(unittest.TestCase):
    def test_reversible(self):
        cycle = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")
        path = TransitionSystem.from_arcs([("s", "t", "a")], initial="s")
        self.assertTrue(is_reversible(cycle))
        self.assertFalse(is_reversible(path))

    def test_reachable_part_keeps_ids_and_locations(self):
        ts = TransitionSystem.from_arcs(
            [("s", "t", "a"), ("x", "s", "b")], initial="s", name="partial"
        )
        ts.add_state("t", index=1)
        ts.set_location("a", "left")
        ts.set_location("b", "right")
        self.assertFalse(is_totally_reachable(ts))

        part = reachable_part(ts)
        self.assertTrue(is_totally_reachable(part))
        self.assertEqual(part.states, ["s", "t"])
        self.assertEqual(part.alphabet, ["a", "b"])
        self.assertEqual(part.location("b"), "right")
        self.assertEqual(part.state_attr("t", "index"), 1)
        self.assertEqual(len(part.arcs), 1)
        self.assertEqual(part.initial_state, "s")


class TestPersistence(unittest.TestCase):
    def test_diamond_is_persistent(self):
        ts = diamond()
        self.assertTrue(is_persistent(ts))
        self.assertTrue(is_persistent(ts, backward=True))

    def test_conflict_is_not_persistent(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("s", "u", "b")], initial="s")
        self.assertFalse(is_persistent(ts))
        violation = find_persistence_violation(ts)
        self.assertEqual(violation[0], "s")
        self.assertEqual({violation[1], violation[2]}, {"a", "b"})
        # reversed arcs never meet in a state with two incoming labels
        self.assertTrue(is_persistent(ts, backward=True))


if __name__ == "__main__":
    unittest.main()
