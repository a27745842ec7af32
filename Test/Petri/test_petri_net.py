import unittest

from regionkit.exceptions import SynthesisError
from regionkit.Petri.petri_net import PetriNet


def cycle_net() -> PetriNet:
    pn = PetriNet("cycle")
    pn.add_transition("a")
    pn.add_transition("b")
    p0 = pn.add_place(1)
    p1 = pn.add_place()
    pn.add_flow(p0, "a")
    pn.add_flow("a", p1)
    pn.add_flow(p1, "b")
    pn.add_flow("b", p0)
    return pn


class TestPetriNet(unittest.TestCase):
    def test_construction(self):
        pn = cycle_net()
        self.assertEqual(pn.places, ["p0", "p1"])
        self.assertEqual(pn.transitions, ["a", "b"])
        self.assertEqual(pn.initial_marking, (1, 0))
        self.assertEqual(pn.preset("a"), ["p0"])
        self.assertEqual(pn.postset("a"), ["p1"])
        self.assertEqual(pn.kind("p0"), "place")
        self.assertEqual(repr(pn), "PetriNet(name='cycle', |P|=2, |T|=2)")

    def test_flows_accumulate(self):
        pn = cycle_net()
        pn.add_flow("p0", "a", 2)
        self.assertEqual(pn.weight("p0", "a"), 3)
        self.assertEqual(pn.weight("a", "p0"), 0)

    def test_invalid_construction(self):
        pn = cycle_net()
        with self.assertRaises(ValueError):
            pn.add_place(-1)
        with self.assertRaises(ValueError):
            pn.add_flow("p0", "a", 0)
        with self.assertRaises(ValueError):
            pn.add_flow("p0", "p1")
        with self.assertRaises(ValueError):
            pn.add_flow("a", "b")
        with self.assertRaises(ValueError):
            pn.add_transition("p0")

    def test_fire(self):
        pn = cycle_net()
        marking = pn.fire(pn.initial_marking, "a")
        self.assertEqual(marking, (0, 1))
        self.assertFalse(pn.is_enabled(marking, "a"))
        with self.assertRaises(ValueError):
            pn.fire(marking, "a")

    def test_reachability_graph(self):
        graph = cycle_net().reachability_graph()
        self.assertEqual(graph.states, ["m0", "m1"])
        self.assertEqual(graph.initial_state, "m0")
        self.assertEqual(graph.state_attr("m1", "marking"), (0, 1))
        self.assertEqual(graph.successors("m0", "a"), ["m1"])
        self.assertEqual(graph.successors("m1", "b"), ["m0"])

    def test_dead_transition_stays_in_alphabet(self):
        pn = cycle_net()
        pn.add_transition("c")
        pn.add_flow(pn.add_place(), "c")
        self.assertEqual(pn.reachability_graph().alphabet, ["a", "b", "c"])

    def test_limit(self):
        pn = PetriNet("unbounded")
        pn.add_transition("a")
        pn.add_flow("a", pn.add_place())
        with self.assertRaises(SynthesisError):
            pn.reachability_graph(limit=5)
        self.assertEqual(len(cycle_net().reachability_graph(limit=2)), 2)


if __name__ == "__main__":
    unittest.main()
