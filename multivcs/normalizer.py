"""
Rewrite captured tool output before it is shown.

Rules are applied in order, once each, to the whole captured text. A
later rule sees the text as earlier rules left it, so order matters.
Rules that replace with nothing suppress expected boilerplate, which is
what keeps a run with nothing to report silent.
"""

from typing import Callable, Iterable, Optional

from .domain.command import ReplacerRule

Tracer = Callable[[str], None]


def normalize(
    text: str,
    rules: Iterable[ReplacerRule],
    directory: str,
    trace: Optional[Tracer] = None
) -> str:
    """
    Apply ``rules`` to ``text`` left to right.

    Args:
        text: Captured output
        rules: Replacer rules, in order
        directory: Checkout directory substituted for ``{dir}``
        trace: If given, called with the text before and after each rule

    Returns:
        The rewritten text
    """
    for rule in rules:
        if trace is not None:
            trace(f"midoutput_pre[{rule.printable_pattern}]=<<<{text}>>>")
        # Never loop: some patterns would keep matching their own output
        text = rule.apply(text, directory)
        if trace is not None:
            trace(f"midoutput_post[{rule.printable_pattern}]=<<<{text}>>>")
    return text
