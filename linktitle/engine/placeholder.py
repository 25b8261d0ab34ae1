"""Marker strings that stand in for a title while it is being fetched."""

from __future__ import annotations

import random
import string
from typing import Callable, Dict, Optional

ZERO_WIDTH_SPACE = "\u200b"
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_LENGTH = 4


def suffix_token(base: str, rng: random.Random) -> str:
    """``base#xxxx`` with four random lowercase alphanumerics."""

    suffix = "".join(rng.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{base}#{suffix}"


def invisible_token(base: str, rng: random.Random) -> str:
    """``base`` with 0-2 zero-width spaces after every character.

    Renders exactly like ``base`` while being one of 3**len(base) strings.
    """

    return "".join(char + ZERO_WIDTH_SPACE * rng.randint(0, 2) for char in base)


STRATEGIES: Dict[str, Callable[[str, random.Random], str]] = {
    "suffix": suffix_token,
    "invisible": invisible_token,
}


def generate(base: str, strategy: str = "suffix", rng: Optional[random.Random] = None) -> str:
    """Return a placeholder token for ``base`` using the named strategy."""

    try:
        build = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown placeholder strategy: {strategy!r}") from None
    return build(base, rng or random.Random())
