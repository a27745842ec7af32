import unittest

from regionkit.exceptions import UnsupportedPropertiesError
from regionkit.Region.properties import PNProperties
from regionkit.Region.utility import RegionUtility
from regionkit.Separation.base import separates_event, separates_states
from regionkit.Separation.elementary import ElementarySeparation, Operation, RoughRegion
from regionkit.TS.transition_system import TransitionSystem


def cycle() -> TransitionSystem:
    return TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")


class TestElementarySeparation(unittest.TestCase):
    def setUp(self) -> None:
        self.utility = RegionUtility(cycle())
        self.safe = PNProperties().require_safe()

    def test_event_separation(self):
        separation = ElementarySeparation(self.utility, self.safe, [None, None])
        region = separation.separate_event("t", "a")
        self.assertIsNotNone(region)
        self.assertTrue(region.is_valid())
        self.assertTrue(separates_event(region, "t", "a"))
        self.assertEqual(region.backward_weight("a"), 1)
        self.assertEqual(region.forward_weight("b"), 1)
        self.assertEqual(region.initial_marking, 1)

    def test_enabled_event_is_not_separated(self):
        separation = ElementarySeparation(self.utility, self.safe, [None, None])
        self.assertIsNone(separation.separate_event("s", "a"))

    def test_state_separation(self):
        separation = ElementarySeparation(self.utility, self.safe.replace(pure=True), [None, None])
        region = separation.separate_states("s", "t")
        self.assertIsNotNone(region)
        self.assertTrue(region.is_valid())
        self.assertTrue(separates_states(region, "s", "t"))

    def test_side_condition_for_impure_nets(self):
        # a self-loop can only be prevented in u by a place that a reads
        ts = TransitionSystem.from_arcs([("s", "s", "a"), ("s", "u", "b")], initial="s")
        utility = RegionUtility(ts)
        pure = ElementarySeparation(utility, self.safe.replace(pure=True), [None, None])
        self.assertIsNone(pure.separate_event("u", "a"))
        impure = ElementarySeparation(utility, self.safe, [None, None])
        region = impure.separate_event("u", "a")
        self.assertIsNotNone(region)
        self.assertTrue(region.is_valid())
        self.assertEqual(region.backward_weight("a"), 1)
        self.assertEqual(region.forward_weight("a"), 1)

    def test_unsupported(self):
        for properties in (PNProperties(), PNProperties().require_k_bounded(2), self.safe.replace(tnet=True)):
            with self.subTest(properties=str(properties)):
                with self.assertRaises(UnsupportedPropertiesError):
                    ElementarySeparation(self.utility, properties, [None, None])

    def test_not_totally_reachable(self):
        ts = cycle()
        ts.add_state("x")
        with self.assertRaises(UnsupportedPropertiesError):
            ElementarySeparation(RegionUtility(ts), self.safe, [None, None])


class TestRoughRegion(unittest.TestCase):
    def test_conflicting_assignment_is_inconsistent(self):
        separation = ElementarySeparation(
            RegionUtility(cycle()), PNProperties().require_safe(), [None, None]
        )
        region = RoughRegion(separation)
        region.set_state("s", True)
        copy = region.copy()
        region.set_state("s", False)
        self.assertTrue(region.inconsistent)
        self.assertFalse(copy.inconsistent)
        copy.set_label("a", Operation.EXIT)
        copy.set_label("a", Operation.ENTER)
        self.assertTrue(copy.inconsistent)
        self.assertIn("INCONSISTENT", str(copy))

    def test_consumers_share_a_location(self):
        separation = ElementarySeparation(
            RegionUtility(cycle()), PNProperties().require_safe(), ["left", "right"]
        )
        region = RoughRegion(separation)
        region.set_label("a", Operation.EXIT)
        self.assertFalse(region.inconsistent)
        region.set_label("b", Operation.INSIDE)
        self.assertTrue(region.inconsistent)


if __name__ == "__main__":
    unittest.main()
