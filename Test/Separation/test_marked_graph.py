import unittest

from regionkit.exceptions import UnsupportedPropertiesError
from regionkit.Region.properties import PNProperties
from regionkit.Region.utility import RegionUtility
from regionkit.Separation.base import separates_event, separates_states
from regionkit.Separation.marked_graph import (
    MarkedGraphSeparation,
    unique_predecessor_parikh_vectors,
)
from regionkit.TS.transition_system import TransitionSystem


def cycle() -> TransitionSystem:
    return TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")


class TestMarkedGraphSeparation(unittest.TestCase):
    def setUp(self) -> None:
        self.utility = RegionUtility(cycle())
        self.properties = PNProperties(marked_graph=True, plain=True)

    def test_unique_predecessors(self):
        vectors = unique_predecessor_parikh_vectors(self.utility)
        self.assertEqual(set(vectors), {0, 1})
        self.assertEqual(list(vectors[0]), [1, 0])

    def test_regions_of_a_cycle(self):
        separation = MarkedGraphSeparation(self.utility, self.properties, [None, None])
        self.assertEqual(len(separation.regions), 2)
        for region in separation.regions:
            self.assertTrue(region.is_valid())
            self.assertTrue(region.is_pure())

        self.assertTrue(separates_event(separation.separate_event("t", "a"), "t", "a"))
        self.assertTrue(separates_event(separation.separate_event("s", "b"), "s", "b"))
        self.assertTrue(separates_states(separation.separate_states("s", "t"), "s", "t"))

    def test_not_reversible(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "u", "b")], initial="s")
        with self.assertRaises(UnsupportedPropertiesError):
            MarkedGraphSeparation(RegionUtility(ts), self.properties, [None, None])

    def test_dead_event(self):
        ts = TransitionSystem.from_arcs([], initial=0)
        ts.add_event("a")
        with self.assertRaises(UnsupportedPropertiesError):
            MarkedGraphSeparation(RegionUtility(ts), PNProperties(), [None])

    def test_unsupported_properties(self):
        with self.assertRaises(UnsupportedPropertiesError):
            MarkedGraphSeparation(self.utility, PNProperties().require_safe(), [None, None])


if __name__ == "__main__":
    unittest.main()
