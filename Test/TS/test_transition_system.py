import unittest

from regionkit.TS.transition_system import Arc, TransitionSystem


class TestTransitionSystem(unittest.TestCase):
    def setUp(self) -> None:
        self.ts = TransitionSystem.from_arcs(
            [("s", "t", "a"), ("t", "u", "b"), ("u", "u", "c")], initial="s", name="path"
        )

    def test_from_arcs_basic_properties(self):
        ts = self.ts
        self.assertEqual(ts.name, "path")
        self.assertEqual(ts.initial_state, "s")
        self.assertEqual(ts.states, ["s", "t", "u"])
        self.assertEqual(ts.alphabet, ["a", "b", "c"])
        self.assertEqual(len(ts), 3)
        self.assertIn("t", ts)
        self.assertNotIn("x", ts)
        self.assertIn(Arc("s", "t", "a"), ts.arcs)

    def test_successors_and_predecessors(self):
        ts = self.ts
        self.assertEqual(ts.successors("s"), ["t"])
        self.assertEqual(ts.successors("s", "a"), ["t"])
        self.assertEqual(ts.successors("s", "b"), [])
        self.assertEqual(ts.predecessors("u", "b"), ["t"])
        self.assertEqual(ts.enabled("u"), {"c"})
        self.assertTrue(ts.is_enabled("t", "b"))
        self.assertFalse(ts.is_enabled("t", "a"))

    def test_neighbouring_arcs_lists_self_loops_once(self):
        arcs = self.ts.neighbouring_arcs("u")
        self.assertEqual(len(arcs), 2)
        self.assertIn(Arc("u", "u", "c"), arcs)
        self.assertIn(Arc("t", "u", "b"), arcs)

    def test_duplicate_arc_is_noop(self):
        before = len(self.ts.arcs)
        arc = self.ts.add_arc("s", "t", "a")
        self.assertEqual(arc, Arc("s", "t", "a"))
        self.assertEqual(len(self.ts.arcs), before)

    def test_fresh_state_ids_skip_existing(self):
        ts = TransitionSystem()
        ts.add_state("s0")
        fresh = ts.add_state()
        self.assertEqual(fresh, "s1")
        self.assertEqual(ts.add_state(), "s2")

    def test_state_attributes(self):
        ts = TransitionSystem()
        s = ts.add_state(None, index=3)
        self.assertEqual(ts.state_attr(s, "index"), 3)
        self.assertIsNone(ts.state_attr(s, "missing"))
        ts.set_state_attr(s, "index", 4)
        self.assertEqual(ts.state_attr(s, "index"), 4)

    def test_initial_state_errors(self):
        ts = TransitionSystem()
        with self.assertRaises(ValueError):
            _ = ts.initial_state
        with self.assertRaises(KeyError):
            ts.initial_state = "nowhere"

    def test_locations(self):
        ts = self.ts
        self.assertIsNone(ts.location("a"))
        ts.set_location("a", "left")
        self.assertEqual(ts.location("a"), "left")
        # registering an existing event without location keeps the location
        ts.add_event("a")
        self.assertEqual(ts.location("a"), "left")
        with self.assertRaises(KeyError):
            ts.set_location("zzz", "left")

    def test_copy_is_independent(self):
        copy = self.ts.copy("other")
        copy.add_arc("u", "s", "d")
        self.assertEqual(copy.name, "other")
        self.assertIn("d", copy.alphabet)
        self.assertNotIn("d", self.ts.alphabet)
        self.assertEqual(len(self.ts.arcs), 3)
        self.assertEqual(copy.initial_state, "s")

    def test_isolated_states(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a")], initial="s", states=["x"])
        self.assertEqual(ts.states, ["s", "x", "t"])
        self.assertEqual(ts.out_arcs("x"), [])


if __name__ == "__main__":
    unittest.main()
