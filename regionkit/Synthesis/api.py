"""
One-call entry points for synthesis.

.. code-block:: python

    from regionkit.Synthesis.api import synthesize_word
    from regionkit.Synthesis.options import parse_options

    result = synthesize_word(["a", "b", "b", "a", "a"], parse_options("none"))
    result.success                    # False
    result.essp_failure_text          # "a, b, [a] b, a, a"
    print(result.summary)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Hashable, List, Optional, Sequence

from ..Petri.petri_net import PetriNet
from ..Region.region import Region
from ..TS.transition_system import TransitionSystem
from ..TS.word import format_essp_failures, format_ssp_failures, word_ts
from .diagnostics import format_solved_event_state_separation_problems
from .minimize import MinimizePN
from .options import SynthesisOptions
from .synthesize_pn import SynthesizePN

logger = logging.getLogger(__name__)


@dataclass
class SynthesisResult:
    """
    Outcome of :func:`synthesize` or :func:`synthesize_word`.

    An unsuccessful synthesis is a normal result: ``pn`` is ``None`` and the
    failure fields describe what could not be solved.
    """

    success: bool
    pn: Optional[PetriNet] = None
    regions: List[Region] = field(default_factory=list)

    # Unsolved problems, in terms of the states of the input
    failed_essp: Dict[str, FrozenSet[Hashable]] = field(default_factory=dict)
    failed_ssp: List[FrozenSet[Hashable]] = field(default_factory=list)

    # Only filled in on request
    solved_essp_text: Optional[str] = None
    essp_failure_text: Optional[str] = None
    ssp_failure_text: Optional[str] = None

    @property
    def summary(self) -> str:
        lines: List[str] = []
        if self.success:
            lines.append(f"Synthesis succeeded with {len(self.regions)} places.")
        else:
            lines.append(
                f"Synthesis failed: {len(self.failed_essp)} events could not be prevented "
                f"everywhere, {len(self.failed_ssp)} classes of states could not be separated."
            )
        for event in sorted(self.failed_essp):
            states = sorted(str(state) for state in self.failed_essp[event])
            lines.append(f"  event {event} stays enabled at states {states}")
        for group in self.failed_ssp:
            lines.append(f"  states {sorted(str(state) for state in group)} are not separated")
        if self.essp_failure_text is not None:
            lines.append(f"separationFailurePoints: {self.essp_failure_text}")
        if self.ssp_failure_text is not None:
            lines.append(f"stateSeparationFailurePoints: {self.ssp_failure_text}")
        if self.solved_essp_text is not None:
            lines.append(f"solvedEventStateSeparationProblems: {self.solved_essp_text}")
        return "\n".join(lines)


def run_synthesis(ts: TransitionSystem, options: SynthesisOptions) -> SynthesizePN:
    """Run :class:`SynthesizePN` in the mode selected by ``options``."""
    kwargs = dict(
        quick_fail=options.quick_fail,
        try_factorize=options.try_factorize,
        strategy_factory=options.strategy_factory,
    )
    if options.language_equivalence:
        return SynthesizePN.for_language_equivalence(
            ts, options.properties, options.interrupter, **kwargs
        )
    return SynthesizePN.for_isomorphic_behaviour(
        ts, options.properties, options.interrupter, **kwargs
    )


def synthesize(ts: TransitionSystem, options: Optional[SynthesisOptions] = None) -> SynthesisResult:
    """
    Synthesise a Petri net for ``ts``.

    With ``options.minimize`` a successful synthesis is followed by
    :class:`~regionkit.Synthesis.minimize.MinimizePN`. With
    ``options.verbose`` the result carries a report of which region solves
    which event/state separation problem.

    :param ts: The transition system.
    :param options: Synthesis options, by default :class:`SynthesisOptions`.
    :returns: The result, also when synthesis fails.
    :rtype: SynthesisResult
    :raises NonDeterministicError: For language equivalence on a
        nondeterministic system.
    :raises SynthesisInterrupted: If ``options.interrupter`` fires.
    """
    if options is None:
        options = SynthesisOptions()
    synthesis = run_synthesis(ts, options)

    if synthesis.was_successfully_separated() and options.minimize:
        minimized = MinimizePN(synthesis)
        regions = minimized.regions
        pn = minimized.synthesize_petri_net()
    else:
        regions = synthesis.regions
        pn = synthesis.synthesize_petri_net()

    result = SynthesisResult(
        success=synthesis.was_successfully_separated(),
        pn=pn,
        regions=regions,
        failed_essp=synthesis.failed_event_state_separation_problems,
        failed_ssp=synthesis.failed_state_separation_problems,
    )
    if options.verbose:
        result.solved_essp_text = format_solved_event_state_separation_problems(
            synthesis.ts, regions
        )
    logger.info("Synthesis of %r finished: success=%s", ts.name, result.success)
    return result


def synthesize_word(word: Sequence[str], options: Optional[SynthesisOptions] = None) -> SynthesisResult:
    """
    Synthesise a Petri net whose prefix language is that of ``word``.

    With ``options.cyclic`` the word is repeated forever. Failures are also
    rendered inside the word, see
    :func:`~regionkit.TS.word.format_essp_failures` and
    :func:`~regionkit.TS.word.format_ssp_failures`.

    :param word: The letters of the word.
    :param options: Synthesis options, by default :class:`SynthesisOptions`.
    :rtype: SynthesisResult
    """
    if options is None:
        options = SynthesisOptions()
    ts = word_ts(word, options.cyclic)
    result = synthesize(ts, options)
    result.essp_failure_text = format_essp_failures(word, ts, result.failed_essp)
    result.ssp_failure_text = format_ssp_failures(word, ts, result.failed_ssp)
    return result
