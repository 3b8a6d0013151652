"""
三目並べ (Tic-Tac-Toe)

MCTSのサンプルゲーム。盤面は各プレイヤーの石を9ビットのビットボードで持つ

マス番号:
    0 1 2
    3 4 5
    6 7 8
"""

from typing import Iterable, Tuple

from uct.mcts.game import Outcome

FULL_BOARD = 0x1FF

WINNING_LINES = (
    0b000_000_111, 0b000_111_000, 0b111_000_000,
    0b001_001_001, 0b010_010_010, 0b100_100_100,
    0b100_010_001, 0b001_010_100,
)


def _is_win(stones: int) -> bool:
    return any((line & stones) == line for line in WINNING_LINES)


class TicTacToe:
    """
    三目並べの局面

    不変オブジェクト。move() は新しい局面を返す。
    プレイヤー0が X（先手）、プレイヤー1が O
    """

    __slots__ = ("xos", "iplayer")

    n_moves = 9

    def __init__(self, xos: Tuple[int, int] = (0, 0), iplayer: int = 0):
        """
        Args:
            xos: (プレイヤー0の石, プレイヤー1の石) のビットボード
            iplayer: 手番
        """
        if xos[0] & xos[1]:
            raise ValueError("a cell cannot hold both players' stones")
        self.xos = (int(xos[0]), int(xos[1]))
        self.iplayer = iplayer

    @classmethod
    def from_moves(cls, moves: Iterable[int]) -> "TicTacToe":
        """初期局面から着手列を順に打った局面を作る"""
        state = cls()
        for move in moves:
            if not state.is_valid(move):
                raise ValueError(f"move {move} is not valid")
            state = state.move(move)
        return state

    def player_turn(self) -> int:
        return self.iplayer

    def winner(self) -> Outcome:
        w0, w1 = _is_win(self.xos[0]), _is_win(self.xos[1])
        if w0:
            return Outcome.WIN
        if w1:
            return Outcome.LOSS
        if (self.xos[0] | self.xos[1]) == FULL_BOARD:
            return Outcome.TIE
        return Outcome.NONE

    def n_valid_moves(self) -> int:
        return 9 - bin(self.xos[0] | self.xos[1]).count("1")

    def is_valid(self, move: int) -> bool:
        if not 0 <= move < 9:
            return False
        return ((1 << move) & (self.xos[0] | self.xos[1])) == 0

    def move(self, k: int) -> "TicTacToe":
        xos = list(self.xos)
        xos[self.iplayer] |= 1 << k
        return TicTacToe((xos[0], xos[1]), (self.iplayer + 1) & 1)

    def cell(self, index: int) -> str:
        """マスの表示文字 (X / O / -)"""
        if self.xos[0] & (1 << index):
            return "X"
        if self.xos[1] & (1 << index):
            return "O"
        return "-"

    def __eq__(self, other) -> bool:
        if not isinstance(other, TicTacToe):
            return NotImplemented
        return self.xos == other.xos and self.iplayer == other.iplayer

    def __hash__(self) -> int:
        return hash((self.xos, self.iplayer))

    def __str__(self) -> str:
        rows = []
        for i in range(3):
            rows.append("".join(self.cell(3 * i + j) for j in range(3)))
        return "\n".join(rows)

    def __repr__(self) -> str:
        return f"TicTacToe(xos=({self.xos[0]:#05x}, {self.xos[1]:#05x}), iplayer={self.iplayer})"
