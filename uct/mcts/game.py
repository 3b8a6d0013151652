"""
ゲームインターフェース定義

MCTSが要求するゲーム側の機能と、勝敗を表す定数を提供する
"""

from enum import IntEnum
from typing import Protocol, TypeVar, runtime_checkable


class Outcome(IntEnum):
    """
    勝敗状態（常にプレイヤー0視点）

    WIN/TIE/LOSS の数値はそのまま勝ち数の加算値として使う
    """
    WIN = 1
    TIE = 0
    LOSS = -1
    NONE = -2  # 未終局


@runtime_checkable
class Game(Protocol):
    """
    MCTSで探索可能なゲームのインターフェース

    Attributes:
        n_moves: 任意の局面での最大着手数（クラス定数）
    """

    n_moves: int

    def player_turn(self) -> int:
        """手番 (0 or 1)。0が先手"""
        ...

    def winner(self) -> Outcome:
        """勝敗。未終局ならOutcome.NONE"""
        ...

    def n_valid_moves(self) -> int:
        """現在の合法手数 (0 < n <= n_moves)"""
        ...

    def is_valid(self, move: int) -> bool:
        """着手 0 <= move < n_moves が合法か"""
        ...

    def move(self, k: int) -> "Game":
        """着手kを打った新しい局面を返す（自身は変更しない）"""
        ...


G = TypeVar("G", bound=Game)
