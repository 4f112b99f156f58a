# names.py
"""Display names for people, drawn from the simulation's random source."""

import numpy as np

FIRST_NAMES: tuple[str, ...] = (
    "Ada", "Bruno", "Clara", "Dmitri", "Elena", "Felix", "Greta", "Hugo",
    "Ines", "Jonas", "Kasia", "Lars", "Mira", "Nils", "Olga", "Pavel",
    "Quinn", "Rosa", "Stefan", "Tess", "Ulla", "Viktor", "Wanda", "Yannick", "Zofia",
)
NICKNAMES: tuple[str, ...] = (
    "Ace", "Buttons", "Chip", "Duke", "Flash", "Lucky", "Moss", "Pepper",
    "Red", "Scout", "Sparrow", "Tiny",
)
LAST_NAMES: tuple[str, ...] = (
    "Andersen", "Baker", "Carter", "Dunn", "Evans", "Fischer", "Gruber", "Hale",
    "Iversen", "Jansen", "Kowalski", "Lindqvist", "Moreau", "Novak", "Ortega",
    "Price", "Rossi", "Schmidt", "Tanaka", "Vogel", "Weber", "Young",
)

# Share of people who get a nickname between first and last name.
NICKNAME_PROBABILITY = 0.2


def generate_name(rng: np.random.Generator) -> str:
    first = FIRST_NAMES[int(rng.integers(len(FIRST_NAMES)))]
    last = LAST_NAMES[int(rng.integers(len(LAST_NAMES)))]
    if rng.random() < NICKNAME_PROBABILITY:
        nickname = NICKNAMES[int(rng.integers(len(NICKNAMES)))]
        return f'{first} "{nickname}" {last}'
    return f"{first} {last}"
