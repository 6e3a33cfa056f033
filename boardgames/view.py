"""Pure projection of game state into a view model for rendering."""

from typing import Any, Dict, Optional

from .board import Board, Color, Move, Piece, PieceType
from .engine import CapturedLedger
from .rules import GameVariant

# Display glyphs, as the browser clients draw them
CHESS_GLYPHS = {
    Color.WHITE: {
        PieceType.KING: "♔", PieceType.QUEEN: "♕", PieceType.ROOK: "♖",
        PieceType.BISHOP: "♗", PieceType.KNIGHT: "♘", PieceType.PAWN: "♙",
    },
    Color.BLACK: {
        PieceType.KING: "♚", PieceType.QUEEN: "♛", PieceType.ROOK: "♜",
        PieceType.BISHOP: "♝", PieceType.KNIGHT: "♞", PieceType.PAWN: "♟",
    },
}

JANGGI_GLYPHS = {
    PieceType.CHARIOT: "車",
    PieceType.CANNON: "包",
    PieceType.HORSE: "馬",
    PieceType.ELEPHANT: "象",
    PieceType.GUARD: "士",
}

JANGGI_GENERAL = {Color.CHO: "楚", Color.HAN: "漢"}
JANGGI_SOLDIER = {Color.CHO: "卒", Color.HAN: "兵"}

STONE_GLYPHS = {Color.BLACK: "●", Color.WHITE: "○"}


def piece_glyph(piece: Optional[Piece]) -> Optional[str]:
    """Glyph for a piece or stone."""
    if piece is None:
        return None
    if piece.piece_type is None:
        return STONE_GLYPHS.get(piece.color, "?")
    if piece.color in CHESS_GLYPHS:
        return CHESS_GLYPHS[piece.color][piece.piece_type]
    if piece.piece_type == PieceType.GENERAL:
        return JANGGI_GENERAL[piece.color]
    if piece.piece_type == PieceType.SOLDIER:
        return JANGGI_SOLDIER[piece.color]
    return JANGGI_GLYPHS.get(piece.piece_type, "?")


def build_view(
    variant: GameVariant,
    board: Board,
    current_player: Color,
    status: str,
    ledger: Optional[CapturedLedger] = None,
    last_move: Optional[Move] = None,
    winner: Optional[Color] = None,
    time_left: Optional[int] = None,
    players: Optional[Dict[str, Optional[str]]] = None,
) -> Dict[str, Any]:
    """Build the view model. Reads its inputs only."""
    ledger = ledger or CapturedLedger()
    return {
        "game": variant.name,
        "rows": board.rows,
        "cols": board.cols,
        "cells": [
            [
                {"code": piece.to_code(), "glyph": piece_glyph(piece), "color": piece.color.value}
                if piece is not None else None
                for piece in row
            ]
            for row in board.grid
        ],
        "current_player": current_player.value,
        "status": status,
        "captured": {
            color.value: [piece_glyph(piece) for piece in ledger.pieces(color)]
            for color in variant.colors
        },
        "last_move": (
            {"from": list(last_move.from_square), "to": list(last_move.to_square)}
            if last_move is not None else None
        ),
        "winner": winner.value if winner else None,
        "timer": time_left,
        "players": dict(players or {}),
    }
