from typing import Optional, Sequence

from referee.models import Seat

WINNING_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)


def detect_winner(board: Sequence[Optional[Seat]]) -> Optional[Seat]:
    """Return the seat holding a complete line, or None."""
    for a, b, c in WINNING_LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    return None


def board_full(board: Sequence[Optional[Seat]]) -> bool:
    return all(cell is not None for cell in board)
