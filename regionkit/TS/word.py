"""
Transition systems of words and readable failure reports over them.

``word_ts(["a", "b", "a"])`` is the path ``s0 -a-> s1 -b-> s2 -a-> s3``;
with ``cyclic=True`` the last arc returns to ``s0``. Every state records its
position in the word as the ``index`` attribute, which the formatters use
to place separation failures between the letters of the word.
"""

from __future__ import annotations

from typing import Collection, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Set

from .transition_system import TransitionSystem


def word_ts(word: Sequence[str], cyclic: bool = False) -> TransitionSystem:
    """
    Build the transition system accepting exactly the prefixes of ``word``.

    :param word: The letters of the word.
    :param cyclic: Close the path into a cycle (accepting all prefixes of
        ``word`` repeated forever).
    :rtype: TransitionSystem
    """
    ts = TransitionSystem("word " + ",".join(word))
    state = ts.add_state(None, index=0)
    ts.initial_state = state
    for index, label in enumerate(word, 1):
        if cyclic and index == len(word):
            target = ts.initial_state
        else:
            target = ts.add_state(None, index=index)
        ts.add_arc(state, target, label)
        state = target
    return ts


def _append_failure(parts: List[str], failures: Set[str]) -> None:
    if not failures:
        return
    if parts:
        parts.append(" ")
    parts.append("[" + ",".join(sorted(failures)) + "]")


def format_essp_failures(
    word: Sequence[str],
    ts: TransitionSystem,
    failures: Mapping[str, Iterable[Hashable]],
) -> Optional[str]:
    """
    Render failed event/state separation problems inside the word.

    The events that could not be prevented after ``i`` letters are written
    in brackets before letter ``i``, e.g. ``a, b, [a] b, a, a``.

    :returns: The rendering, or ``None`` when there are no failures.
    """
    if not failures:
        return None
    failed: List[Set[str]] = [set() for _ in range(len(word) + 1)]
    for event, states in failures.items():
        for state in states:
            failed[ts.state_attr(state, "index")].add(event)

    parts: List[str] = []
    for index, letter in enumerate(word):
        if index != 0:
            parts.append(",")
        _append_failure(parts, failed[index])
        if parts:
            parts.append(" ")
        parts.append(letter)
    _append_failure(parts, failed[len(word)])
    return "".join(parts)


def format_ssp_failures(
    word: Sequence[str],
    ts: TransitionSystem,
    failures: Collection[Iterable[Hashable]],
) -> Optional[str]:
    """
    Render failed state separation problems inside the word.

    States in the same unseparated class are marked with the same number,
    e.g. ``a, 1 a, 1 a`` when the states after one and after two ``a`` are
    not separable.

    :returns: The rendering, or ``None`` when there are no failures.
    """
    if not failures:
        return None
    separable: Dict[int, int] = {}
    for number, states in enumerate(failures, 1):
        for state in states:
            separable[ts.state_attr(state, "index")] = number

    parts: List[str] = []
    for index, letter in enumerate(word):
        if index != 0:
            parts.append(",")
        if index in separable:
            if index != 0:
                parts.append(" ")
            parts.append(str(separable[index]))
        if parts:
            parts.append(" ")
        parts.append(letter)
    if len(word) in separable:
        parts.append(" " + str(separable[len(word)]))
    return "".join(parts)
