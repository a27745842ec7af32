import unittest

from regionkit.exceptions import UnsupportedPropertiesError
from regionkit.Region.properties import PNProperties
from regionkit.Region.utility import RegionUtility
from regionkit.Separation.base import separates_event, separates_states
from regionkit.Separation.output_nonbranching import OutputNonbranchingSeparation
from regionkit.TS.transition_system import TransitionSystem


def cycle() -> TransitionSystem:
    return TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")


class TestOutputNonbranchingSeparation(unittest.TestCase):
    def setUp(self) -> None:
        self.utility = RegionUtility(cycle())
        self.locations = ["la", "lb"]

    def test_regions_of_a_cycle(self):
        separation = OutputNonbranchingSeparation(self.utility, PNProperties(), self.locations)
        self.assertEqual(len(separation.regions), 2)
        for region in separation.regions:
            self.assertTrue(region.is_valid())
            # one consumer per place
            consumers = [e for e in ("a", "b") if region.backward_weight(e) > 0]
            self.assertLessEqual(len(consumers), 1)

        self.assertTrue(separates_event(separation.separate_event("t", "a"), "t", "a"))
        self.assertTrue(separates_event(separation.separate_event("s", "b"), "s", "b"))
        self.assertTrue(separates_states(separation.separate_states("s", "t"), "s", "t"))

    def test_unsupported_properties(self):
        with self.assertRaises(UnsupportedPropertiesError):
            OutputNonbranchingSeparation(self.utility, PNProperties(pure=True), self.locations)

    def test_every_event_needs_a_location(self):
        with self.assertRaises(UnsupportedPropertiesError):
            OutputNonbranchingSeparation(self.utility, PNProperties(), [None, None])
        with self.assertRaises(UnsupportedPropertiesError):
            OutputNonbranchingSeparation(self.utility, PNProperties(), ["la", "la"])


if __name__ == "__main__":
    unittest.main()
