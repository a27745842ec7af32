import unittest

from regionkit.exceptions import NonDeterministicError
from regionkit.Petri.checks import is_isomorphic, is_language_equivalent
from regionkit.TS.transition_system import TransitionSystem
from regionkit.TS.unfolding import ORIGINAL_STATE, limited_unfolding


class TestLimitedUnfolding(unittest.TestCase):
    def test_cycle_is_kept(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")
        unfolding = limited_unfolding(ts)
        self.assertEqual(len(unfolding), 2)
        self.assertEqual(len(unfolding.arcs), 2)
        self.assertTrue(is_isomorphic(ts, unfolding))
        originals = {unfolding.state_attr(s, ORIGINAL_STATE) for s in unfolding.states}
        self.assertEqual(originals, {"s", "t"})
        self.assertEqual(unfolding.state_attr(unfolding.initial_state, ORIGINAL_STATE), "s")

    def test_join_is_duplicated(self):
        # two different paths into t give two copies of t
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("s", "t", "b")], initial="s")
        unfolding = limited_unfolding(ts)
        self.assertEqual(len(unfolding), 3)
        copies = [s for s in unfolding.states if unfolding.state_attr(s, ORIGINAL_STATE) == "t"]
        self.assertEqual(len(copies), 2)
        self.assertTrue(is_language_equivalent(ts, unfolding))

    def test_attributes_and_locations_are_copied(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a")], initial="s")
        ts.add_state("t", index=1)
        ts.set_location("a", "here")
        unfolding = limited_unfolding(ts)
        copy = unfolding.successors(unfolding.initial_state, "a")[0]
        self.assertEqual(unfolding.state_attr(copy, "index"), 1)
        self.assertEqual(unfolding.location("a"), "here")

    def test_nondeterministic_input(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("s", "u", "a")], initial="s")
        with self.assertRaises(NonDeterministicError):
            limited_unfolding(ts)


if __name__ == "__main__":
    unittest.main()
