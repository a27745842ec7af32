import unittest

from regionkit.Region.properties import PNProperties
from regionkit.Region.utility import RegionUtility
from regionkit.Synthesis.factorisation import FactorisationSynthesizer
from regionkit.Synthesis.synthesizer import FixedSynthesizer
from regionkit.TS.transition_system import TransitionSystem


def diamond() -> TransitionSystem:
    return TransitionSystem.from_arcs(
        [("s0", "s1", "a"), ("s0", "s2", "b"), ("s1", "s3", "b"), ("s2", "s3", "a")],
        initial="s0",
        name="diamond",
    )


class TestFactorisationSynthesizer(unittest.TestCase):
    def test_factors_are_combined(self):
        utility = RegionUtility(diamond())
        synthesizer = FactorisationSynthesizer().create_synthesizer(utility, PNProperties(), False)
        self.assertIsNotNone(synthesizer)
        self.assertTrue(synthesizer.was_successful())
        self.assertTrue(synthesizer.regions)
        for region in synthesizer.regions:
            self.assertIs(region.utility, utility)
            self.assertTrue(region.is_valid())

    def test_not_factorisable(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "u", "b")], initial="s")
        result = FactorisationSynthesizer().create_synthesizer(RegionUtility(ts), PNProperties(), False)
        self.assertIsNone(result)

    def test_nondeterminism_is_a_state_separation_failure(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("s", "u", "a")], initial="s")
        result = FactorisationSynthesizer().create_synthesizer(RegionUtility(ts), PNProperties(), False)
        self.assertEqual(result.unsolvable_state_separation_problems, [{"t", "u"}])
        self.assertEqual(result.unsolvable_event_state_separation_problems, {})

    def test_first_failure_is_reported(self):
        calls = []

        def failing(utility, properties, only_event_separation):
            calls.append(utility.ts.alphabet)
            return FixedSynthesizer(essp={"a": {"s1", "s3"}})

        result = FactorisationSynthesizer(failing).create_synthesizer(
            RegionUtility(diamond()), PNProperties(), False
        )
        self.assertEqual(calls, [["a"]])
        self.assertFalse(result.was_successful())
        essp = result.unsolvable_event_state_separation_problems
        self.assertEqual(list(essp), ["a"])
        self.assertEqual(len(essp["a"]), 1)

    def test_unreachable_states_are_not_factorised(self):
        # factors would silently drop the unreachable arc 2 -a-> 3
        ts = TransitionSystem.from_arcs([(0, 1, "b"), (2, 3, "a")], initial=0)
        result = FactorisationSynthesizer().create_synthesizer(
            RegionUtility(ts), PNProperties(pure=True), False
        )
        self.assertIsNone(result)

    def test_state_separation_failure_of_a_factor(self):
        def failing(utility, properties, only_event_separation):
            return FixedSynthesizer(ssp=[{"s0", "s1"}])

        result = FactorisationSynthesizer(failing).create_synthesizer(
            RegionUtility(diamond()), PNProperties(), False
        )
        self.assertEqual(result.unsolvable_state_separation_problems, [{"s0", "s1"}])


if __name__ == "__main__":
    unittest.main()
