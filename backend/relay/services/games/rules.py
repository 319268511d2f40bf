from typing import Sequence, Tuple

from relay.models import BOARD_SIZE, MAX_MOVES, SLOTS

Board = Sequence[Sequence[int]]


def check_win(board: Board, mark: int) -> bool:
    """Return True if ``mark`` fills a full row, column or diagonal."""
    n = BOARD_SIZE
    for i in range(n):
        if all(board[i][j] == mark for j in range(n)):
            return True
        if all(board[j][i] == mark for j in range(n)):
            return True
    if all(board[i][i] == mark for i in range(n)):
        return True
    return all(board[i][n - 1 - i] == mark for i in range(n))


def terminal_status(board: Board, move_count: int) -> Tuple[int, bool]:
    """Return ``(winner, game_over)`` for a board.

    Mark A is checked before mark B, so a board where both have a line
    reports A. ``winner`` is 0 when nobody has won; the game is still over
    once every cell is filled.
    """
    winner = 0
    for mark in SLOTS:
        if check_win(board, mark):
            winner = mark
            break
    return winner, bool(winner) or move_count == MAX_MOVES
