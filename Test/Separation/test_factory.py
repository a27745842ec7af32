import unittest

from regionkit.exceptions import MissingLocationError
from regionkit.Region.properties import PNProperties
from regionkit.Region.utility import RegionUtility
from regionkit.Separation.base import has_locations, location_map
from regionkit.Separation.basic import BasicImpureSeparation, BasicPureSeparation
from regionkit.Separation.elementary import ElementarySeparation
from regionkit.Separation.factory import create_separation
from regionkit.Separation.inequality import InequalitySystemSeparation
from regionkit.Separation.kbounded import KBoundedSeparation
from regionkit.Separation.marked_graph import MarkedGraphSeparation
from regionkit.TS.transition_system import TransitionSystem


def cycle() -> TransitionSystem:
    return TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")


def path() -> TransitionSystem:
    return TransitionSystem.from_arcs([("s", "t", "a")], initial="s")


class TestLocationMap(unittest.TestCase):
    def test_no_locations(self):
        self.assertEqual(location_map(RegionUtility(cycle()), PNProperties()), [None, None])

    def test_output_nonbranching_gives_one_location_per_event(self):
        locations = location_map(RegionUtility(cycle()), PNProperties(output_nonbranching=True))
        self.assertEqual(locations, ["0", "1"])
        self.assertTrue(has_locations(locations))

    def test_shared_location_is_dropped(self):
        ts = cycle()
        ts.set_location("a", "here")
        ts.set_location("b", "here")
        self.assertEqual(location_map(RegionUtility(ts), PNProperties()), [None, None])

    def test_partial_locations(self):
        ts = cycle()
        ts.set_location("a", "left")
        with self.assertRaises(MissingLocationError):
            location_map(RegionUtility(ts), PNProperties())


class TestCreateSeparation(unittest.TestCase):
    def check(self, ts, properties, expected):
        separation = create_separation(RegionUtility(ts), properties)
        self.assertIs(type(separation), expected)

    def test_dispatch(self):
        cases = [
            (cycle(), PNProperties().require_safe(), ElementarySeparation),
            (cycle(), PNProperties().require_k_bounded(2), KBoundedSeparation),
            (cycle(), PNProperties(marked_graph=True, plain=True), MarkedGraphSeparation),
            (path(), PNProperties(pure=True), BasicPureSeparation),
            (path(), PNProperties(), BasicImpureSeparation),
            (path(), PNProperties(merge_free=True), InequalitySystemSeparation),
        ]
        for ts, properties, expected in cases:
            with self.subTest(properties=str(properties), expected=expected.__name__):
                self.check(ts, properties, expected)

    def test_custom_factory(self):
        separation = create_separation(
            RegionUtility(cycle()), PNProperties(), InequalitySystemSeparation
        )
        self.assertIsInstance(separation, InequalitySystemSeparation)

    def test_custom_factory_without_strategy(self):
        with self.assertRaises(ValueError):
            create_separation(RegionUtility(cycle()), PNProperties(), lambda *args: None)

    def test_partial_locations(self):
        ts = cycle()
        ts.set_location("a", "left")
        with self.assertRaises(MissingLocationError):
            create_separation(RegionUtility(ts), PNProperties())


if __name__ == "__main__":
    unittest.main()
