import unittest

from regionkit.exceptions import NonDeterministicError, PreconditionFailedError
from regionkit.TS.cycles import find_home_state, search_small_cycles
from regionkit.TS.transition_system import TransitionSystem


class TestSmallCycles(unittest.TestCase):
    def test_single_cycle(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")
        self.assertEqual(search_small_cycles(ts), [{"a": 1, "b": 1}])

    def test_self_loop(self):
        ts = TransitionSystem.from_arcs([("s", "s", "a")], initial="s")
        self.assertEqual(search_small_cycles(ts), [{"a": 1}])

    def test_acyclic_has_no_cycles(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "u", "b")], initial="s")
        self.assertEqual(search_small_cycles(ts), [])

    def test_cycle_after_prefix(self):
        # the home state lies in the terminal component {t, u}
        ts = TransitionSystem.from_arcs(
            [("s", "t", "x"), ("t", "u", "a"), ("u", "t", "b")], initial="s"
        )
        self.assertEqual(find_home_state(ts), "t")
        self.assertEqual(search_small_cycles(ts), [{"a": 1, "b": 1}])

    def test_preconditions(self):
        nondeterministic = TransitionSystem.from_arcs([("s", "t", "a"), ("s", "u", "a")], initial="s")
        with self.assertRaises(NonDeterministicError):
            search_small_cycles(nondeterministic)

        unreachable = TransitionSystem.from_arcs([("s", "t", "a"), ("x", "s", "b")], initial="s")
        with self.assertRaises(PreconditionFailedError):
            search_small_cycles(unreachable)

        conflict = TransitionSystem.from_arcs([("s", "t", "a"), ("s", "u", "b")], initial="s")
        with self.assertRaises(PreconditionFailedError):
            search_small_cycles(conflict)


if __name__ == "__main__":
    unittest.main()
