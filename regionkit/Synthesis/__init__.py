"""
Petri net synthesis from regions.

Re-exported names
-----------------
- :class:`~regionkit.Synthesis.synthesize_pn.SynthesizePN`
- :class:`~regionkit.Synthesis.minimize.MinimizePN`
- :func:`~regionkit.Synthesis.overapproximate.overapproximate`
- :func:`~regionkit.Synthesis.options.parse_options`
- :func:`~regionkit.Synthesis.api.synthesize`, :func:`~regionkit.Synthesis.api.synthesize_word`
"""

from __future__ import annotations

from typing import List

from .synthesizer import (
    FixedSynthesizer,
    SeparationSynthesizer,
    Synthesizer,
    calculate_unseparated_states,
    create_synthesizer,
    event_state_separation_problems,
    minimize_regions,
)
from .factorisation import FactorisationSynthesizer
from .synthesize_pn import SynthesizePN, build_petri_net
from .minimize import MinimizePN
from .overapproximate import SUPPORTED_PROPERTIES, handle_separation_failures, overapproximate
from .options import SynthesisOptions, parse_options
from .diagnostics import format_solved_event_state_separation_problems
from .api import SynthesisResult, run_synthesis, synthesize, synthesize_word

__all__: List[str] = [
    "Synthesizer",
    "FixedSynthesizer",
    "SeparationSynthesizer",
    "FactorisationSynthesizer",
    "calculate_unseparated_states",
    "create_synthesizer",
    "event_state_separation_problems",
    "minimize_regions",
    "SynthesizePN",
    "build_petri_net",
    "MinimizePN",
    "SUPPORTED_PROPERTIES",
    "handle_separation_failures",
    "overapproximate",
    "SynthesisOptions",
    "parse_options",
    "format_solved_event_state_separation_problems",
    "SynthesisResult",
    "run_synthesis",
    "synthesize",
    "synthesize_word",
]
