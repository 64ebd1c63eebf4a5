"""
Domain layer for multivcs.

Contains pure domain objects with no I/O beyond checking that a
checkout's marker directory exists:
- Checkout: A working copy and its upstream location
- CheckoutSpec: A parsed checkout-list section
- CheckoutSet: Ordered, deduplicated collection of checkouts
- Command / ReplacerRule: A subprocess invocation and its output rewrites
- RunOptions: The immutable options for one run
"""

from .checkout import Action, Checkout, CheckoutEntry, CheckoutSpec, RepoType, MARKER_DIRS
from .checkout_set import CheckoutSet
from .command import Command, ExecutionResult, Outcome, ReplacerRule
from .options import RunOptions

__all__ = [
    'Action',
    'Checkout',
    'CheckoutEntry',
    'CheckoutSpec',
    'CheckoutSet',
    'Command',
    'ExecutionResult',
    'MARKER_DIRS',
    'Outcome',
    'RepoType',
    'ReplacerRule',
    'RunOptions',
]
