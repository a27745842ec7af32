"""
Synthesis options and their textual form.

Options are written as a comma separated list, for example
``"safe, pure, minimize"`` or ``"3-bounded,plain,quick-fail"``. Property
tokens set fields of :class:`~regionkit.Region.properties.PNProperties`;
flag tokens set the remaining fields of :class:`SynthesisOptions`.

========================================  =====================================
Token                                     Meaning
========================================  =====================================
``none``                                  no requirement
``safe``, ``<k>-bounded``                 at most 1 (``k``) tokens per place
``<k>-marking``                           initial markings are multiples of k
``pure``, ``plain``, ``tnet``             structural restrictions
``generalized-marked-graph``, ``gmg``     one producer and one consumer
``marked-graph``, ``mg``                  ``gmg`` and ``plain``
``generalized-output-nonbranching``,      at most one consumer
``gon``
``output-nonbranching``, ``on``           ``gon`` and ``plain``
``merge-free``, ``mf``                    at most one producer
``conflict-free``, ``cf``                 see :class:`PNProperties`
``homogeneous``                           equal weights leaving a place
``behaviourally-conflict-free``, ``bcf``  see :class:`PNProperties`
``binary-conflict-free``, ``bicf``        see :class:`PNProperties`
``equal-conflict``, ``ec``                see :class:`PNProperties`
``quick-fail``                            stop at the first failure
``verbose``                               report what each region solves
``upto-language-equivalence``,            only match the language
``language``, ``le``
``minimize``, ``minimise``, ``minimal``   as few places as possible
``cycle``, ``cyclic``                     words only: repeat the word forever
========================================  =====================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from ..exceptions import OptionsError
from ..interrupt import NEVER, Interrupter
from ..Region.properties import PNProperties
from ..Separation.factory import StrategyFactory


@dataclass
class SynthesisOptions:
    """
    Everything that configures one synthesis run.

    :param properties: Requested net properties.
    :param quick_fail: Stop at the first unsolved separation problem.
    :param language_equivalence: Only require language equivalence.
    :param minimize: Search for a net with as few places as possible.
    :param verbose: Describe which problems each region solves.
    :param try_factorize: Synthesise factors separately in quick-fail mode.
    :param cyclic: For words, synthesise the infinite repetition.
    :param strategy_factory: Test hook replacing the strategy dispatch.
    :param interrupter: Cancellation flag.
    """

    properties: PNProperties = field(default_factory=PNProperties)
    quick_fail: bool = False
    language_equivalence: bool = False
    minimize: bool = False
    verbose: bool = False
    try_factorize: bool = True
    cyclic: bool = False
    strategy_factory: Optional[StrategyFactory] = None
    interrupter: Interrupter = NEVER


_PROPERTY_TOKENS: Dict[str, Callable[[PNProperties], PNProperties]] = {
    "none": lambda p: p,
    "safe": lambda p: p.require_safe(),
    "pure": lambda p: p.replace(pure=True),
    "plain": lambda p: p.replace(plain=True),
    "tnet": lambda p: p.replace(tnet=True),
    "generalized-marked-graph": lambda p: p.replace(marked_graph=True),
    "generalised-marked-graph": lambda p: p.replace(marked_graph=True),
    "gmg": lambda p: p.replace(marked_graph=True),
    "marked-graph": lambda p: p.replace(marked_graph=True, plain=True),
    "mg": lambda p: p.replace(marked_graph=True, plain=True),
    "generalized-output-nonbranching": lambda p: p.replace(output_nonbranching=True),
    "generalised-output-nonbranching": lambda p: p.replace(output_nonbranching=True),
    "gon": lambda p: p.replace(output_nonbranching=True),
    "output-nonbranching": lambda p: p.replace(output_nonbranching=True, plain=True),
    "on": lambda p: p.replace(output_nonbranching=True, plain=True),
    "merge-free": lambda p: p.replace(merge_free=True),
    "mf": lambda p: p.replace(merge_free=True),
    "conflict-free": lambda p: p.replace(conflict_free=True),
    "cf": lambda p: p.replace(conflict_free=True),
    "homogeneous": lambda p: p.replace(homogeneous=True),
    "behaviourally-conflict-free": lambda p: p.replace(behaviourally_conflict_free=True),
    "bcf": lambda p: p.replace(behaviourally_conflict_free=True),
    "binary-conflict-free": lambda p: p.replace(binary_conflict_free=True),
    "bicf": lambda p: p.replace(binary_conflict_free=True),
    "equal-conflict": lambda p: p.replace(equal_conflict=True),
    "ec": lambda p: p.replace(equal_conflict=True),
}

_FLAG_TOKENS: Dict[str, str] = {
    "quick-fail": "quick_fail",
    "verbose": "verbose",
    "upto-language-equivalence": "language_equivalence",
    "language": "language_equivalence",
    "le": "language_equivalence",
    "minimize": "minimize",
    "minimise": "minimize",
    "minimal": "minimize",
    "cycle": "cyclic",
    "cyclic": "cyclic",
}

_PARAMETRIC = re.compile(r"^(.*)-(bounded|marking)$")


def _parse_k(token: str, value: str, suffix: str) -> int:
    try:
        k = int(value)
    except ValueError:
        raise OptionsError(
            f"Cannot parse {token!r}: Invalid number for property 'k-{suffix}'"
        ) from None
    if k < 1:
        raise OptionsError(f"Cannot parse {token!r}: Bound must be positive")
    return k


def parse_options(text: str) -> SynthesisOptions:
    """
    Parse a comma separated option string.

    Tokens are case insensitive and surrounding whitespace is ignored. The
    empty string gives the default options.

    :param text: The option string.
    :returns: The parsed options.
    :rtype: SynthesisOptions
    :raises OptionsError: On unknown tokens or invalid numbers.

    .. code-block:: python

        opts = parse_options("3-bounded, pure, quick-fail")
        opts.properties.k_bounded  # 3
        opts.quick_fail            # True
    """
    options = SynthesisOptions()
    text = text.strip()
    if not text:
        return options

    properties = PNProperties()
    for raw in text.split(","):
        token = raw.strip().lower()
        if token in _FLAG_TOKENS:
            setattr(options, _FLAG_TOKENS[token], True)
        elif token in _PROPERTY_TOKENS:
            properties = _PROPERTY_TOKENS[token](properties)
        else:
            match = _PARAMETRIC.match(token)
            if match is None:
                raise OptionsError(f"Cannot parse {token!r}: Unknown property")
            k = _parse_k(token, match.group(1), match.group(2))
            if match.group(2) == "bounded":
                properties = properties.require_k_bounded(k)
            else:
                properties = properties.require_k_marking(k)
    options.properties = properties
    return options
