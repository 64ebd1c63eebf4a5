"""
Insertion-ordered, deduplicated collection of checkouts.
"""

from typing import Dict, Iterable, Iterator

from .checkout import Checkout


class CheckoutSet:
    """
    Ordered set of Checkout objects.

    Adding a checkout equal to one already present is a no-op; the first
    one added is kept, so checkouts read from the checkout list win over
    the same checkouts found by searching.
    """

    def __init__(self, checkouts: Iterable[Checkout] = ()):
        self._items: Dict[Checkout, None] = {}
        self.update(checkouts)

    def add(self, checkout: Checkout) -> bool:
        """Add a checkout; return True if it was not already present."""
        if checkout in self._items:
            return False
        self._items[checkout] = None
        return True

    def update(self, checkouts: Iterable[Checkout]) -> int:
        """Add several checkouts; return how many were new."""
        return sum(1 for c in checkouts if self.add(c))

    def __contains__(self, checkout: object) -> bool:
        return checkout in self._items

    def __iter__(self) -> Iterator[Checkout]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"CheckoutSet({list(self._items)!r})"
