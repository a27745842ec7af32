import unittest

from regionkit.exceptions import SynthesisInterrupted
from regionkit.interrupt import Interrupter
from regionkit.Region.properties import PNProperties
from regionkit.Synthesis.api import SynthesisResult, synthesize, synthesize_word
from regionkit.Synthesis.options import SynthesisOptions, parse_options
from regionkit.TS.transition_system import TransitionSystem


def cycle() -> TransitionSystem:
    return TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")


def path() -> TransitionSystem:
    return TransitionSystem.from_arcs([("s", "t", "a"), ("t", "u", "b")], initial="s")


class TestSynthesize(unittest.TestCase):
    def test_success(self):
        result = synthesize(cycle())
        self.assertIsInstance(result, SynthesisResult)
        self.assertTrue(result.success)
        self.assertIsNotNone(result.pn)
        self.assertEqual(len(result.pn.places), len(result.regions))
        self.assertEqual(result.summary, f"Synthesis succeeded with {len(result.regions)} places.")
        self.assertIsNone(result.solved_essp_text)

    def test_failure(self):
        result = synthesize(path(), SynthesisOptions(properties=PNProperties(k_bounded=0)))
        self.assertFalse(result.success)
        self.assertIsNone(result.pn)
        self.assertEqual(result.failed_essp, {"a": frozenset({"t", "u"}), "b": frozenset({"s", "u"})})
        lines = result.summary.splitlines()
        self.assertEqual(
            lines[0],
            "Synthesis failed: 2 events could not be prevented everywhere, "
            "1 classes of states could not be separated.",
        )
        self.assertIn("  event a stays enabled at states ['t', 'u']", lines)
        self.assertIn("  states ['s', 't', 'u'] are not separated", lines)

    def test_verbose(self):
        result = synthesize(cycle(), parse_options("verbose"))
        self.assertTrue(result.solved_essp_text.startswith("\nRegion {"))
        self.assertIn("\n\tseparates event a at states [t]", result.solved_essp_text)
        self.assertIn("solvedEventStateSeparationProblems:", result.summary)

    def test_verbose_without_problems(self):
        result = synthesize(TransitionSystem.from_arcs([], initial="s"), parse_options("verbose"))
        self.assertTrue(result.success)
        self.assertEqual(result.solved_essp_text, "none")

    def test_minimize(self):
        plain = synthesize(path())
        minimized = synthesize(path(), parse_options("minimize"))
        self.assertTrue(minimized.success)
        self.assertLessEqual(len(minimized.regions), len(plain.regions))

    def test_language_equivalence(self):
        result = synthesize(cycle(), parse_options("le, pure"))
        self.assertTrue(result.success)
        self.assertTrue(all(region.is_pure() for region in result.regions))


class TestSynthesizeWord(unittest.TestCase):
    def test_success(self):
        result = synthesize_word(["a", "b", "a", "b"])
        self.assertTrue(result.success)
        self.assertIsNone(result.essp_failure_text)
        self.assertIsNone(result.ssp_failure_text)

    def test_cyclic(self):
        result = synthesize_word(["a", "b"], parse_options("cyclic, safe"))
        self.assertTrue(result.success)
        self.assertEqual(len(result.pn.reachability_graph()), 2)

    def test_failure_inside_word(self):
        result = synthesize_word(["a", "b", "b", "a", "a"], parse_options("none"))
        self.assertFalse(result.success)
        self.assertTrue(result.essp_failure_text.startswith("a, b, [a] b"))
        self.assertIn("separationFailurePoints: a, b, [a] b", result.summary)

    def test_state_separation_failure_inside_word(self):
        result = synthesize_word(["a", "a"], SynthesisOptions(properties=PNProperties(k_bounded=0)))
        self.assertFalse(result.success)
        self.assertEqual(result.ssp_failure_text, "1 a, 1 a 1")



class TestRobustness(unittest.TestCase):
    def test_quick_fail_with_unreachable_states(self):
        ts = TransitionSystem.from_arcs([(0, 1, "b"), (2, 3, "a")], initial=0)
        for text in ("safe, quick-fail", "pure, quick-fail", "pure"):
            with self.subTest(options=text):
                result = synthesize(ts, parse_options(text))
                self.assertFalse(result.success)
                self.assertIsNone(result.pn)
                # only the unreachable states are obstructions
                for states in result.failed_essp.values():
                    self.assertNotIn(0, states)
                    self.assertNotIn(1, states)

    def test_dead_event_is_prevented(self):
        ts = TransitionSystem.from_arcs([], initial=0)
        ts.add_event("a")
        result = synthesize(ts)
        self.assertTrue(result.success)
        self.assertEqual(result.pn.transitions, ["a"])

    def test_interrupted(self):
        for text in ("2-bounded", "mg", "minimize"):
            with self.subTest(options=text):
                options = parse_options(text)
                options.interrupter = Interrupter()
                options.interrupter.request()
                with self.assertRaises(SynthesisInterrupted):
                    synthesize(cycle(), options)

    def test_repeatable(self):
        nondeterministic = TransitionSystem.from_arcs([("s", "t1", "a"), ("s", "t2", "a")], initial="s")
        for ts in (cycle(), path(), nondeterministic):
            with self.subTest(ts=ts.name):
                self.assertEqual(synthesize(ts).success, synthesize(ts).success)


if __name__ == "__main__":
    unittest.main()
