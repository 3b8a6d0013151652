"""
三目並べのテストケース
"""

import pytest

from uct.games import GAMES, TicTacToe
from uct.mcts.game import Game, Outcome


class TestTicTacToeBasics:
    """基本機能テスト"""

    def test_initial_state(self):
        """初期局面のテスト"""
        state = TicTacToe()

        assert state.player_turn() == 0
        assert state.winner() == Outcome.NONE
        assert state.n_valid_moves() == 9
        assert all(state.is_valid(m) for m in range(9))

    def test_move_returns_new_state(self):
        """move()は元の局面を変更しないこと"""
        state = TicTacToe()

        after = state.move(4)

        assert state == TicTacToe()
        assert after.cell(4) == "X"
        assert after.player_turn() == 1
        assert not after.is_valid(4)
        assert after.n_valid_moves() == 8

    def test_turns_alternate(self):
        """手番が交互に入れ替わること"""
        state = TicTacToe.from_moves([0, 1, 2])

        assert state.player_turn() == 1
        assert state.cell(0) == "X"
        assert state.cell(1) == "O"
        assert state.cell(2) == "X"

    def test_is_valid_out_of_range(self):
        """範囲外の着手は不正"""
        state = TicTacToe()

        assert not state.is_valid(-1)
        assert not state.is_valid(9)

    def test_from_moves_rejects_occupied_cell(self):
        """埋まったマスへの着手はValueError"""
        with pytest.raises(ValueError):
            TicTacToe.from_moves([4, 4])

    def test_overlapping_bitboards(self):
        """同じマスに両者の石がある盤面は作れないこと"""
        with pytest.raises(ValueError):
            TicTacToe(xos=(0b1, 0b1))

    def test_equality_and_hash(self):
        """同じ局面は等しく、ハッシュも一致すること"""
        a = TicTacToe.from_moves([0, 4])
        b = TicTacToe(xos=(0b000_000_001, 0b000_010_000), iplayer=0)

        assert a == b
        assert hash(a) == hash(b)
        assert a != TicTacToe.from_moves([4, 0, 8])

    def test_str(self):
        """盤面の文字列表現"""
        state = TicTacToe.from_moves([0, 4, 8])

        assert str(state) == "X--\n-O-\n--X"

    def test_satisfies_game_protocol(self):
        """Gameプロトコルを満たすこと"""
        assert isinstance(TicTacToe(), Game)
        assert GAMES["tictactoe"] is TicTacToe


class TestWinner:
    """勝敗判定テスト"""

    @pytest.mark.parametrize("line", [
        (0, 1, 2), (3, 4, 5), (6, 7, 8),
        (0, 3, 6), (1, 4, 7), (2, 5, 8),
        (0, 4, 8), (2, 4, 6),
    ])
    def test_player0_wins(self, line):
        """プレイヤー0の3つ並びでWIN"""
        state = TicTacToe(xos=(sum(1 << m for m in line), 0), iplayer=1)

        assert state.winner() == Outcome.WIN

    @pytest.mark.parametrize("line", [
        (0, 1, 2), (3, 4, 5), (6, 7, 8),
        (0, 3, 6), (1, 4, 7), (2, 5, 8),
        (0, 4, 8), (2, 4, 6),
    ])
    def test_player1_wins(self, line):
        """プレイヤー1の3つ並びでLOSS"""
        state = TicTacToe(xos=(0, sum(1 << m for m in line)), iplayer=0)

        assert state.winner() == Outcome.LOSS

    def test_win_by_play(self):
        """着手で勝ちが決まること"""
        state = TicTacToe.from_moves([0, 3, 1, 4])

        assert state.winner() == Outcome.NONE
        assert state.move(2).winner() == Outcome.WIN

    def test_tie_game(self):
        """盤面が埋まり3つ並びが無ければTIE"""
        # X O X
        # X O O
        # O X X
        state = TicTacToe.from_moves([0, 1, 2, 4, 3, 5, 7, 6, 8])

        assert state.n_valid_moves() == 0
        assert state.winner() == Outcome.TIE

    def test_full_board_with_line_is_win(self):
        """盤面が埋まっていても3つ並びがあれば勝ち"""
        # X O X
        # O X O
        # O X X
        xs = 0b110_010_101
        state = TicTacToe(xos=(xs, 0x1FF ^ xs), iplayer=1)

        assert state.n_valid_moves() == 0
        assert state.winner() == Outcome.WIN
