"""Fisher-Yates shuffle."""

from __future__ import annotations
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """
    Return a uniformly shuffled copy of items.

    The input is left untouched. Pass a seeded random.Random for
    deterministic decks.
    """
    rand = rng or random
    shuffled = list(items)

    for i in range(len(shuffled) - 1, 0, -1):
        j = rand.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]

    return shuffled
