import unittest

import z3

from regionkit.Region.properties import PNProperties
from regionkit.Region.utility import RegionUtility
from regionkit.Solver.smt import RegionEncoder
from regionkit.TS.transition_system import TransitionSystem


def cycle() -> TransitionSystem:
    return TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")


class TestRegionEncoder(unittest.TestCase):
    def solve(self, properties, extra=None, ts=None, locations=None):
        utility = RegionUtility(ts or cycle())
        if locations is None:
            locations = [None] * utility.number_of_events
        encoder = RegionEncoder(utility, properties, locations)
        region = encoder.new_region()
        solver = z3.Solver()
        solver.add(encoder.is_region(region))
        if extra is not None:
            solver.add(extra(region))
        if solver.check() != z3.sat:
            return None
        return region.to_region(solver.model())

    def test_state_separating_region(self):
        for properties in (PNProperties(), PNProperties(pure=True), PNProperties().require_safe()):
            with self.subTest(properties=str(properties)):
                region = self.solve(properties, lambda r: r.marking("s") != r.marking("t"))
                self.assertIsNotNone(region)
                self.assertTrue(region.is_valid())
                self.assertNotEqual(region.marking_for_state("s"), region.marking_for_state("t"))

    def test_pure_region_has_no_side_conditions(self):
        region = self.solve(PNProperties(pure=True), lambda r: r.marking("t") + r.weight[0] < 0)
        self.assertIsNotNone(region)
        self.assertTrue(region.is_pure())
        self.assertLess(region.marking_for_state("t"), region.backward_weight("a"))

    def test_bound_is_respected(self):
        region = self.solve(PNProperties().require_safe(), lambda r: r.initial_marking >= 2)
        self.assertIsNone(region)

    def test_k_marking(self):
        region = self.solve(PNProperties(k_marking=3), lambda r: r.initial_marking > 0)
        self.assertIsNotNone(region)
        self.assertEqual(region.initial_marking % 3, 0)

    def test_plain(self):
        region = self.solve(PNProperties(plain=True), lambda r: r.backward[0] >= 2)
        self.assertIsNone(region)

    def test_merge_free(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "u", "b")], initial="s")
        region = self.solve(
            PNProperties(merge_free=True),
            lambda r: z3.And(r.forward[0] > 0, r.forward[1] > 0),
            ts=ts,
        )
        self.assertIsNone(region)

    def test_locations_limit_consumers(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "u", "b")], initial="s")
        region = self.solve(
            PNProperties(),
            lambda r: z3.And(r.backward[0] > 0, r.backward[1] > 0),
            ts=ts,
            locations=["left", "right"],
        )
        self.assertIsNone(region)

    def test_output_nonbranching_must_be_expressed_as_locations(self):
        utility = RegionUtility(cycle())
        with self.assertRaises(AssertionError):
            RegionEncoder(utility, PNProperties(output_nonbranching=True), [None, None])

    def test_enabling_classes(self):
        ts = TransitionSystem.from_arcs(
            [("s", "t", "a"), ("s", "u", "b"), ("t", "v", "c")], initial="s"
        )
        encoder = RegionEncoder(RegionUtility(ts), PNProperties(), [None] * 3)
        self.assertEqual(encoder.enabling_classes(), [[0, 1], [2]])

    def test_behavioural_conflicts_ignore_unreachable_states(self):
        # a and b are only enabled together in the unreachable state x
        ts = TransitionSystem.from_arcs(
            [("s", "t", "a"), ("t", "s", "b"), ("x", "y", "a"), ("x", "z", "b")], initial="s"
        )
        region = self.solve(
            PNProperties(behaviourally_conflict_free=True),
            lambda r: z3.And(r.backward[0] >= 1, r.backward[1] >= 1),
            ts=ts,
        )
        self.assertIsNotNone(region)
        self.assertGreaterEqual(region.backward_weight("a"), 1)
        self.assertGreaterEqual(region.backward_weight("b"), 1)


if __name__ == "__main__":
    unittest.main()
