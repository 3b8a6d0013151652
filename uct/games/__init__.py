"""
ゲーム実装モジュール

MCTSのGameインターフェースを満たすサンプルゲーム
"""

from .tictactoe import TicTacToe

GAMES = {
    "tictactoe": TicTacToe,
}

__all__ = [
    "GAMES",
    "TicTacToe",
]
