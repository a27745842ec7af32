import unittest

from regionkit.exceptions import NonDeterministicError
from regionkit.TS.factorisation import create_factor, factorise
from regionkit.TS.transition_system import Arc, TransitionSystem


def diamond() -> TransitionSystem:
    return TransitionSystem.from_arcs(
        [("s0", "s1", "a"), ("s0", "s2", "b"), ("s1", "s3", "b"), ("s2", "s3", "a")],
        initial="s0",
        name="diamond",
    )


class TestFactorisation(unittest.TestCase):
    def test_concurrent_events_are_split(self):
        factors = factorise(diamond())
        self.assertEqual(len(factors), 2)
        first, second = factors
        self.assertEqual(first.alphabet, ["a"])
        self.assertEqual(second.alphabet, ["b"])
        self.assertEqual(first.states, ["s0", "s1"])
        self.assertEqual(first.arcs, [Arc("s0", "s1", "a")])
        self.assertEqual(second.states, ["s0", "s2"])
        self.assertEqual(first.initial_state, "s0")

    def test_sequence_is_not_split(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("t", "u", "b")], initial="s")
        factors = factorise(ts)
        self.assertEqual(len(factors), 1)
        self.assertIs(factors[0], ts)

    def test_conflict_is_not_split(self):
        ts = TransitionSystem.from_arcs([("s", "t", "a"), ("s", "u", "b")], initial="s")
        self.assertEqual(len(factorise(ts)), 1)

    def test_requires_determinism(self):
        ts = TransitionSystem.from_arcs([("s", "u", "a"), ("t", "u", "a"), ("s", "t", "b")], initial="s")
        with self.assertRaises(NonDeterministicError):
            factorise(ts)

    def test_create_factor_keeps_connected_part(self):
        ts = diamond()
        ts.set_location("b", "right")
        factor = create_factor(ts, ["b"])
        self.assertEqual(factor.alphabet, ["b"])
        self.assertEqual(factor.location("b"), "right")
        self.assertEqual(set(factor.states), {"s0", "s2"})
        self.assertEqual(factor.arcs, [Arc("s0", "s2", "b")])


if __name__ == "__main__":
    unittest.main()
