"""Per-game rule sets, selected by name when a session or room is created."""

from typing import Dict, List

from .base import GameVariant
from .chess import ChessVariant
from .janggi import JanggiVariant
from .omok import OmokVariant

VARIANTS: Dict[str, GameVariant] = {
    variant.name: variant
    for variant in (ChessVariant(), JanggiVariant(), OmokVariant())
}


def get_variant(name: str) -> GameVariant:
    """Look up a game variant by name ("chess", "janggi" or "omok")."""
    try:
        return VARIANTS[name]
    except KeyError:
        raise ValueError(f"Unknown game: {name!r}") from None


def available_games() -> List[str]:
    return sorted(VARIANTS)


__all__ = [
    "GameVariant", "ChessVariant", "JanggiVariant", "OmokVariant",
    "VARIANTS", "get_variant", "available_games",
]
