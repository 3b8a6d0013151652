"""
評価システムのテストケース

- プレイヤーの動作テスト
- MatchRunner（対戦管理）のテスト
- 統合テスト
"""

import numpy as np
import pytest

from uct.games import TicTacToe
from uct.eval.match import (
    MatchResult,
    MatchRunner,
    evaluate_player,
    evaluate_search,
    summarize_results,
)
from uct.eval.players import MCTSPlayer, RandomPlayer
from uct.mcts.game import Outcome


class TestPlayers:
    """プレイヤークラスのテスト"""

    def test_random_player(self):
        """RandomPlayerの動作テスト"""
        player = RandomPlayer(rng=np.random.default_rng(0))
        state = TicTacToe()

        action = player.get_action(state)

        assert state.is_valid(action)

    def test_player_multiple_moves(self):
        """複数手での動作テスト"""
        player = RandomPlayer(rng=np.random.default_rng(1))
        state = TicTacToe()

        while state.winner() == Outcome.NONE:
            action = player.get_action(state)
            assert state.is_valid(action)
            state = state.move(action)

    def test_mcts_player(self):
        """MCTSPlayerの動作テスト"""
        player = MCTSPlayer(num_rollouts=50, rng=np.random.default_rng(2))
        state = TicTacToe.from_moves([4])

        action = player.get_action(state)

        assert state.is_valid(action)
        assert player.name == "MCTS-50"

    def test_mcts_player_takes_win(self):
        """MCTSPlayerは即勝ちの手を選ぶこと"""
        player = MCTSPlayer(num_rollouts=50, rng=np.random.default_rng(3))

        assert player.get_action(TicTacToe.from_moves([0, 3, 1, 4])) == 2

    def test_parallel_mcts_player(self):
        """ルート並列化のMCTSPlayer"""
        player = MCTSPlayer(num_rollouts=30, num_trees=2, rng=np.random.default_rng(4))
        state = TicTacToe()

        action = player.get_action(state)

        assert state.is_valid(action)
        assert player.name == "MCTS-2x30"


class TestMatchRunner:
    """MatchRunnerのテスト"""

    def test_single_game(self):
        """1ゲームの実行テスト"""
        runner = MatchRunner(TicTacToe, verbose=False)
        player1 = RandomPlayer("Random1", rng=np.random.default_rng(5))
        player2 = RandomPlayer("Random2", rng=np.random.default_rng(6))

        result = runner.play_game(player1, player2)

        assert isinstance(result, MatchResult)
        assert result.player1_name == "Random1"
        assert result.player2_name == "Random2"
        assert result.winner in (1, -1, 0)
        assert 5 <= result.num_moves <= 9
        assert result.num_moves == len(result.moves)
        assert result.duration >= 0

    def test_moves_replay_to_result(self):
        """記録した着手列を再生すると同じ勝敗になること"""
        runner = MatchRunner(TicTacToe, verbose=False)
        player1 = RandomPlayer(rng=np.random.default_rng(7))
        player2 = RandomPlayer(rng=np.random.default_rng(8))

        result = runner.play_game(player1, player2, player1_seat=0)
        final = TicTacToe.from_moves(result.moves)

        assert result.outcome == final.winner()
        expected = {1: 1, -1: -1, 0: 0}[int(final.winner())]
        assert result.winner == expected

    def test_winner_relative_to_seat(self):
        """後手に座ったプレイヤー1の勝敗は反転して記録されること"""
        runner = MatchRunner(TicTacToe, verbose=False)
        player1 = RandomPlayer(rng=np.random.default_rng(17))
        player2 = RandomPlayer(rng=np.random.default_rng(18))

        for _ in range(10):
            result = runner.play_game(player1, player2, player1_seat=1)
            if result.outcome == Outcome.WIN:
                assert result.winner == -1
            elif result.outcome == Outcome.LOSS:
                assert result.winner == 1
            else:
                assert result.winner == 0
            assert result.seat_names() == [player2.name, player1.name]

    def test_multiple_games_alternate_seats(self):
        """複数ゲームで先後が交互になること"""
        runner = MatchRunner(TicTacToe, verbose=False)
        player1 = RandomPlayer("Random1", rng=np.random.default_rng(9))
        player2 = RandomPlayer("Random2", rng=np.random.default_rng(10))

        results = runner.play_matches(player1, player2, num_games=4)

        assert len(results) == 4
        assert [r.player1_seat for r in results] == [0, 1, 0, 1]
        for result in results:
            assert isinstance(result, MatchResult)

    def test_verbose_output(self, capsys):
        """verbose時は着手と1局ごとの結果を表示すること"""
        runner = MatchRunner(TicTacToe, verbose=True)
        player1 = RandomPlayer("Random1", rng=np.random.default_rng(11))
        player2 = RandomPlayer("Random2", rng=np.random.default_rng(12))

        results = runner.play_matches(player1, player2, num_games=2)

        out = capsys.readouterr().out
        assert "P0=Random1 P1=Random2" in out
        assert "P0=Random2 P1=Random1" in out
        for result in results:
            assert str(result) in out

    def test_invalid_seat(self):
        """席番号は0か1"""
        runner = MatchRunner(TicTacToe, verbose=False)

        with pytest.raises(ValueError):
            runner.play_game(RandomPlayer(), RandomPlayer(), player1_seat=2)

    def test_invalid_move_raises(self):
        """不正な着手を返すプレイヤーはValueError"""

        class BadPlayer(RandomPlayer):
            def get_action(self, state):
                return 9

        runner = MatchRunner(TicTacToe, verbose=False)

        with pytest.raises(ValueError):
            runner.play_game(BadPlayer("Bad"), RandomPlayer())


class TestEvaluation:
    """評価関数のテスト"""

    def test_evaluate_player(self):
        """evaluate_player関数のテスト"""
        player = RandomPlayer("Random1", rng=np.random.default_rng(13))
        opponent = RandomPlayer("Random2", rng=np.random.default_rng(14))

        stats = evaluate_player(TicTacToe, player, opponent, num_games=6, verbose=False)

        assert "win_rate" in stats
        assert "draw_rate" in stats
        assert "loss_rate" in stats
        assert "avg_moves" in stats
        assert len(stats["results"]) == 6
        assert stats["win_rate"] + stats["draw_rate"] + stats["loss_rate"] == pytest.approx(1.0)
        assert stats["by_seat"][0]["games"] == 3
        assert stats["by_seat"][1]["games"] == 3

    def test_summarize_results_by_seat(self):
        """集計が席ごと・プレイヤー1視点で行われること"""
        def result(seat, outcome):
            return MatchResult("A", "B", seat, outcome, num_moves=5, duration=0.5)

        results = [
            result(0, Outcome.WIN),   # Aが先手で勝ち
            result(1, Outcome.WIN),   # Aが後手で負け
            result(1, Outcome.LOSS),  # Aが後手で勝ち
            result(0, Outcome.TIE),
        ]

        summary = summarize_results(results)

        assert (summary["wins"], summary["draws"], summary["losses"]) == (2, 1, 1)
        assert summary["win_rate"] == pytest.approx(0.5)
        assert summary["avg_moves"] == pytest.approx(5.0)
        assert summary["by_seat"][0] == {"games": 2, "wins": 1, "draws": 1, "losses": 0}
        assert summary["by_seat"][1] == {"games": 2, "wins": 1, "draws": 0, "losses": 1}

    def test_summarize_empty(self):
        """0局の集計は割合0"""
        summary = summarize_results([])

        assert summary["win_rate"] == 0.0
        assert summary["by_seat"][0]["games"] == 0

    def test_evaluate_search(self):
        """evaluate_search関数のテスト"""
        stats = evaluate_search(TicTacToe, seeds=[0, 1], num_rollouts=100)

        assert stats["wins"] + stats["draws"] + stats["losses"] == 2
        assert set(stats["records"]) == {0, 1}
        assert 0.0 <= stats["non_loss_rate"] <= 1.0

    def test_evaluate_search_reproducible(self):
        """同じシードなら同じ記録になること"""
        first = evaluate_search(TicTacToe, seeds=[3], num_rollouts=100)
        second = evaluate_search(TicTacToe, seeds=[3], num_rollouts=100)

        assert first["records"][3].moves == second["records"][3].moves


class TestIntegration:
    """統合テスト"""

    def test_mcts_vs_random(self):
        """MCTS vs Random の対戦"""
        mcts = MCTSPlayer(num_rollouts=300, rng=np.random.default_rng(15))
        random_player = RandomPlayer(rng=np.random.default_rng(16))

        stats = evaluate_player(TicTacToe, mcts, random_player, num_games=4, verbose=False)

        assert stats["win_rate"] + stats["draw_rate"] >= 0.5
