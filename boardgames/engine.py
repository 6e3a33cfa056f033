"""Move execution: apply a validated move, track captures, detect game end."""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .board import Board, Color, Move, Piece
from .rules import GameVariant

logger = logging.getLogger(__name__)


@dataclass
class CapturedLedger:
    """Captured pieces per capturing color, in capture order.

    Display only; never consulted by the rules.
    """

    captured: Dict[Color, List[Piece]] = field(default_factory=dict)

    def record(self, capturer: Color, piece: Piece) -> None:
        self.captured.setdefault(capturer, []).append(piece)

    def pieces(self, capturer: Color) -> List[Piece]:
        return list(self.captured.get(capturer, []))

    def reset(self) -> None:
        self.captured.clear()

    def copy(self) -> "CapturedLedger":
        return CapturedLedger({color: list(pieces) for color, pieces in self.captured.items()})

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            color.value: [piece.to_code() for piece in pieces]
            for color, pieces in self.captured.items()
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CapturedLedger":
        ledger = cls()
        for color_value, codes in (data or {}).items():
            for code in codes:
                ledger.record(Color(color_value), Piece.from_code(code))
        return ledger


@dataclass
class MoveResult:
    """Outcome of applying one move."""

    board: Board
    move: Move
    mover: Color
    captured: Optional[Piece] = None
    winner: Optional[Color] = None

    @property
    def ended(self) -> bool:
        return self.winner is not None


def apply_move(
    variant: GameVariant,
    board: Board,
    move: Move,
    mover: Color,
    ledger: Optional[CapturedLedger] = None,
) -> MoveResult:
    """Apply ``move`` to a copy of ``board``.

    The move is assumed to be legal. For placements (omok) a new stone of
    ``mover``'s color is put on the destination; otherwise the piece on the
    source square is moved and any destination occupant is captured and
    appended to ``ledger`` under the capturing color.
    """
    new_board = board.copy()

    if move.is_placement:
        captured = None
        new_board.set_piece(move.to_row, move.to_col, Piece(mover))
    else:
        piece = new_board.get_piece(move.from_row, move.from_col)
        if piece is None:
            raise ValueError(f"No piece on ({move.from_row}, {move.from_col})")
        captured = new_board.get_piece(move.to_row, move.to_col)
        new_board.set_piece(move.from_row, move.from_col, None)
        new_board.set_piece(move.to_row, move.to_col, piece)

    if captured is not None and ledger is not None:
        ledger.record(mover, captured)

    applied = Move(move.from_row, move.from_col, move.to_row, move.to_col, captured)
    winner = variant.check_winner(new_board, applied, mover, captured)
    if winner is not None:
        logger.info("%s game won by %s with %s", variant.name, winner.value, applied)

    return MoveResult(board=new_board, move=applied, mover=mover, captured=captured, winner=winner)


def pick_random_move(
    variant: GameVariant,
    board: Board,
    color: Color,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """Choose uniformly among all legal moves for ``color``, or None if there are none."""
    moves = variant.all_legal_moves(board, color)
    if not moves:
        return None
    return (rng or random).choice(moves)
