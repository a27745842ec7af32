import unittest

from regionkit.Petri import checks
from regionkit.Petri.petri_net import PetriNet
from regionkit.TS.transition_system import TransitionSystem


def net(flows, tokens=(1,)):
    pn = PetriNet()
    for source, target, _ in flows:
        for node in (source, target):
            if not node.startswith("p"):
                pn.add_transition(node)
    places = [pn.add_place(count) for count in tokens]
    for source, target, weight in flows:
        pn.add_flow(source, target, weight)
    return pn, places


class TestStructure(unittest.TestCase):
    def test_cycle_is_a_marked_graph(self):
        pn, _ = net(
            [("p0", "a", 1), ("a", "p1", 1), ("p1", "b", 1), ("b", "p0", 1)], tokens=(1, 0)
        )
        self.assertTrue(checks.is_pure(pn))
        self.assertTrue(checks.is_plain(pn))
        self.assertTrue(checks.is_generalized_t_net(pn))
        self.assertTrue(checks.is_generalized_marked_graph(pn))
        self.assertTrue(checks.is_output_nonbranching(pn))
        self.assertTrue(checks.is_merge_free(pn))
        self.assertTrue(checks.is_conflict_free(pn))
        self.assertTrue(checks.is_homogeneous(pn))
        self.assertEqual(checks.max_tokens(pn), 1)
        self.assertTrue(checks.is_k_bounded(pn, 1))

    def test_side_condition(self):
        pn, _ = net([("p0", "a", 1), ("a", "p0", 1)])
        self.assertFalse(checks.is_pure(pn))
        self.assertTrue(checks.is_generalized_marked_graph(pn))

    def test_choice(self):
        pn, _ = net([("p0", "a", 1), ("p0", "b", 2)], tokens=(2,))
        self.assertFalse(checks.is_plain(pn))
        self.assertFalse(checks.is_output_nonbranching(pn))
        self.assertFalse(checks.is_generalized_t_net(pn))
        self.assertFalse(checks.is_conflict_free(pn))
        self.assertFalse(checks.is_homogeneous(pn))
        self.assertTrue(checks.is_merge_free(pn))
        self.assertTrue(checks.is_k_bounded(pn, 2))
        self.assertFalse(checks.is_k_bounded(pn, 1))

    def test_conflict_free_with_shared_side_condition(self):
        pn, _ = net([("p0", "a", 1), ("a", "p0", 1), ("p0", "b", 1), ("b", "p0", 1)])
        self.assertTrue(checks.is_conflict_free(pn))

    def test_distributed_implementation(self):
        pn, _ = net([("p0", "a", 1), ("p0", "b", 1)])
        self.assertTrue(checks.is_distributed_implementation(pn, {"a": "x", "b": "x"}))
        self.assertTrue(checks.is_distributed_implementation(pn, {"a": "x", "b": None}))
        self.assertFalse(checks.is_distributed_implementation(pn, {"a": "x", "b": "y"}))


class TestBehaviour(unittest.TestCase):
    def test_isomorphism_ignores_state_names(self):
        ts1 = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")
        ts2 = TransitionSystem.from_arcs([("x", "y", "a"), ("y", "x", "b")], initial="x")
        self.assertTrue(checks.is_isomorphic(ts1, ts2))

    def test_isomorphism_respects_initial_state(self):
        ts1 = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="s")
        ts2 = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "s", "b")], initial="t")
        self.assertFalse(checks.is_isomorphic(ts1, ts2))

    def test_isomorphism_respects_labels(self):
        ts1 = TransitionSystem.from_arcs([("s", "t", "a")], initial="s")
        ts2 = TransitionSystem.from_arcs([("s", "t", "b")], initial="s")
        self.assertFalse(checks.is_isomorphic(ts1, ts2))

    def test_language_equivalence(self):
        loop = TransitionSystem.from_arcs([("s", "s", "a")], initial="s")
        unrolled = TransitionSystem.from_arcs([("x", "y", "a"), ("y", "x", "a")], initial="x")
        path = TransitionSystem.from_arcs([("x", "y", "a")], initial="x")
        self.assertTrue(checks.is_language_equivalent(loop, unrolled))
        self.assertFalse(checks.is_isomorphic(loop, unrolled))
        self.assertFalse(checks.is_language_equivalent(loop, path))


if __name__ == "__main__":
    unittest.main()
