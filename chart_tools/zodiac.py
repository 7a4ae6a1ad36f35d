from __future__ import annotations

SIGNS = [
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
]

ELEMENTS = {
    "fire": (0, 4, 8),  # Aries, Leo, Sagittarius
    "earth": (1, 5, 9),  # Taurus, Virgo, Capricorn
    "air": (2, 6, 10),  # Gemini, Libra, Aquarius
    "water": (3, 7, 11),  # Cancer, Scorpio, Pisces
}

# Masculine signs; the remaining six are yin.
YANG_SIGNS = frozenset({0, 2, 4, 6, 8, 10})


def element_of(sign_idx: int) -> str:
    for element, signs in ELEMENTS.items():
        if sign_idx % 12 in signs:
            return element
    raise ValueError(f"not a sign index: {sign_idx!r}")


def polarity_of(sign_idx: int) -> str:
    return "yang" if sign_idx % 12 in YANG_SIGNS else "yin"


def same_element(sign_a: int, sign_b: int) -> bool:
    return element_of(sign_a) == element_of(sign_b)


def same_polarity(sign_a: int, sign_b: int) -> bool:
    return polarity_of(sign_a) == polarity_of(sign_b)
