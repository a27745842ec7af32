import unittest

from regionkit.exceptions import SynthesisInterrupted
from regionkit.interrupt import Interrupter
from regionkit.Petri import checks
from regionkit.Region.properties import PNProperties
from regionkit.Synthesis.minimize import MinimizePN
from regionkit.Synthesis.synthesize_pn import SynthesizePN
from regionkit.TS.transition_system import TransitionSystem
from regionkit.TS.word import word_ts


class TestMinimizePN(unittest.TestCase):
    def test_never_more_places(self):
        ts = word_ts(["a", "b", "a", "b"])
        synthesis = SynthesizePN.for_isomorphic_behaviour(ts)
        minimized = MinimizePN(synthesis)
        self.assertTrue(minimized.regions)
        self.assertLessEqual(len(minimized.regions), len(synthesis.regions))
        pn = minimized.synthesize_petri_net()
        self.assertEqual(len(pn.places), len(minimized.regions))
        self.assertTrue(checks.is_isomorphic(pn.reachability_graph(), ts))

    def test_language_equivalence(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")
        synthesis = SynthesizePN.for_language_equivalence(ts, PNProperties(pure=True))
        minimized = MinimizePN(synthesis)
        self.assertLessEqual(len(minimized.regions), len(synthesis.regions))
        self.assertTrue(all(region.is_pure() for region in minimized.regions))

    def test_idempotent(self):
        ts = word_ts(["a", "b", "a", "b"])
        first = MinimizePN(SynthesizePN.for_isomorphic_behaviour(ts))
        second = MinimizePN(SynthesizePN(first.utility, seed_regions=first.regions))
        self.assertEqual(len(second.regions), len(first.regions))

    def test_interrupted(self):
        interrupter = Interrupter()
        synthesis = SynthesizePN.for_isomorphic_behaviour(
            word_ts(["a", "b", "a", "b"]), interrupter=interrupter
        )
        self.assertTrue(synthesis.was_successfully_separated())
        interrupter.request()
        with self.assertRaises(SynthesisInterrupted):
            MinimizePN(synthesis)

    def test_failed_synthesis(self):
        ts = TransitionSystem.from_arcs([("s", "t1", "a"), ("s", "t2", "a")], initial="s")
        synthesis = SynthesizePN.for_isomorphic_behaviour(ts)
        with self.assertRaises(ValueError):
            MinimizePN(synthesis)


if __name__ == "__main__":
    unittest.main()
