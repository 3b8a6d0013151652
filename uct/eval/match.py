"""
対戦管理システム

2つのプレイヤーを対戦させ、結果を記録する。
SearchDriver をシードごとに走らせて勝率を測る評価関数も提供する
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List

import numpy as np

from uct.mcts.arena import DEFAULT_BLOCK_SIZE
from uct.mcts.game import Game, Outcome
from uct.mcts.search import SearchDriver
from .players import Player

# プレイヤー0視点の勝敗 -> 勝った席
_WINNING_SEAT = {Outcome.WIN: 0, Outcome.LOSS: 1}


@dataclass
class MatchResult:
    """
    対戦結果

    Attributes:
        player1_name: プレイヤー1の名前
        player2_name: プレイヤー2の名前
        player1_seat: プレイヤー1が座った席（ゲーム上のプレイヤー番号、0が先手）
        outcome: 終局時の勝敗（ゲーム上のプレイヤー0視点）
        num_moves: 総手数
        duration: 対戦時間（秒）
        moves: 着手列
    """
    player1_name: str
    player2_name: str
    player1_seat: int
    outcome: Outcome
    num_moves: int
    duration: float
    moves: List[int] = field(default_factory=list)

    @property
    def winner(self) -> int:
        """プレイヤー1視点の勝敗 (1: 勝ち, -1: 負け, 0: 引き分け)"""
        seat = _WINNING_SEAT.get(self.outcome)
        if seat is None:
            return 0
        return 1 if seat == self.player1_seat else -1

    def seat_names(self) -> List[str]:
        """席順に並べたプレイヤー名"""
        if self.player1_seat == 0:
            return [self.player1_name, self.player2_name]
        return [self.player2_name, self.player1_name]

    def __str__(self) -> str:
        first, second = self.seat_names()
        return (f"P0={first} P1={second} -> {self.outcome.name} "
                f"after {self.num_moves} moves ({self.duration:.2f}s)")


class MatchRunner:
    """
    対戦管理システム

    2つのプレイヤーを交互に着手させ、1局ごとに MatchResult を返す
    """

    def __init__(self, game_factory: Callable[[], Game], verbose: bool = True):
        """
        Args:
            game_factory: 初期局面を返す関数
            verbose: 着手と結果を表示するか
        """
        self.game_factory = game_factory
        self.verbose = verbose

    def play_game(
        self,
        player1: Player,
        player2: Player,
        player1_seat: int = 0,
    ) -> MatchResult:
        """
        1ゲームを実行

        Args:
            player1: プレイヤー1
            player2: プレイヤー2
            player1_seat: プレイヤー1の席 (0: 先手, 1: 後手)

        Returns:
            MatchResult: 対戦結果
        """
        if player1_seat not in (0, 1):
            raise ValueError(f"player1_seat must be 0 or 1, got {player1_seat}")

        state = self.game_factory()
        seats = (player1, player2) if player1_seat == 0 else (player2, player1)

        for player in seats:
            player.reset()

        moves = []
        start_time = time.time()

        while state.winner() == Outcome.NONE:
            seat = state.player_turn()
            action = seats[seat].get_action(state)

            if not state.is_valid(action):
                raise ValueError(f"{seats[seat].name} returned invalid move {action}")

            if self.verbose:
                print(f"P{seat} {seats[seat].name}: {action}")

            state = state.move(action)
            moves.append(action)

        result = MatchResult(
            player1_name=player1.name,
            player2_name=player2.name,
            player1_seat=player1_seat,
            outcome=Outcome(state.winner()),
            num_moves=len(moves),
            duration=time.time() - start_time,
            moves=moves,
        )

        if self.verbose:
            print(f"{state}\n{result}\n")

        return result

    def play_matches(
        self,
        player1: Player,
        player2: Player,
        num_games: int = 10,
        alternate_seats: bool = True,
    ) -> List[MatchResult]:
        """
        複数ゲームを実行

        Args:
            player1: プレイヤー1
            player2: プレイヤー2
            num_games: ゲーム数
            alternate_seats: 偶数局はプレイヤー1が先手、奇数局は後手にするか

        Returns:
            List[MatchResult]: 対戦結果のリスト（集計は summarize_results で行う）
        """
        results = []
        for game_idx in range(num_games):
            seat = game_idx % 2 if alternate_seats else 0
            results.append(self.play_game(player1, player2, player1_seat=seat))
        return results


def summarize_results(results: List[MatchResult]) -> dict:
    """
    プレイヤー1視点で対戦結果を集計する

    Returns:
        dict:
            - wins / draws / losses と各割合 (win_rate / draw_rate / loss_rate)
            - avg_moves, avg_duration
            - by_seat: {席: {"games", "wins", "draws", "losses"}}
    """
    by_seat: Dict[int, Dict[str, int]] = {
        seat: {"games": 0, "wins": 0, "draws": 0, "losses": 0} for seat in (0, 1)
    }
    for r in results:
        counts = by_seat[r.player1_seat]
        counts["games"] += 1
        counts[{1: "wins", 0: "draws", -1: "losses"}[r.winner]] += 1

    total = len(results)
    wins = sum(s["wins"] for s in by_seat.values())
    draws = sum(s["draws"] for s in by_seat.values())
    losses = sum(s["losses"] for s in by_seat.values())

    def rate(n: float) -> float:
        return n / total if total > 0 else 0.0

    return {
        "wins": wins,
        "draws": draws,
        "losses": losses,
        "win_rate": rate(wins),
        "draw_rate": rate(draws),
        "loss_rate": rate(losses),
        "avg_moves": rate(sum(r.num_moves for r in results)),
        "avg_duration": rate(sum(r.duration for r in results)),
        "by_seat": by_seat,
    }


def evaluate_player(
    game_factory: Callable[[], Game],
    player: Player,
    opponent: Player,
    num_games: int = 10,
    verbose: bool = True,
) -> dict:
    """
    先後を交代しながら player を opponent と対戦させて評価

    Args:
        game_factory: 初期局面を返す関数
        player: 評価対象のプレイヤー
        opponent: 対戦相手
        num_games: ゲーム数
        verbose: 1局ごとの着手と結果を表示するか

    Returns:
        dict: summarize_results の集計に対戦結果リスト (results) を加えたもの
    """
    runner = MatchRunner(game_factory, verbose=verbose)
    results = runner.play_matches(player, opponent, num_games=num_games)

    summary = summarize_results(results)
    summary["results"] = results
    return summary


def evaluate_search(
    game_factory: Callable[[], Game],
    seeds: Iterable[int],
    num_rollouts: int = 1000,
    search_player: int = 0,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> dict:
    """
    シードごとに SearchDriver で1局ずつ対局し、MCTS側の成績を集計する

    Args:
        game_factory: 初期局面を返す関数
        seeds: 乱数シードのリスト（1シード1局）
        num_rollouts: 1手あたりのロールアウト回数
        search_player: MCTSで着手するプレイヤー (0 or 1)
        block_size: アリーナのブロックサイズ

    Returns:
        dict: 評価結果
            - wins / draws / losses: MCTS側視点の勝敗数
            - non_loss_rate: 負けなかった割合
            - records: {seed: GameRecord}
    """
    own_win = Outcome.WIN if search_player == 0 else Outcome.LOSS

    wins = draws = losses = 0
    records = {}

    for seed in seeds:
        driver = SearchDriver(
            game_factory,
            num_rollouts=num_rollouts,
            rng=np.random.default_rng(seed),
            search_player=search_player,
            block_size=block_size,
        )
        record = driver.play()
        records[seed] = record

        if record.outcome == own_win:
            wins += 1
        elif record.outcome == Outcome.TIE:
            draws += 1
        else:
            losses += 1

    total = len(records)
    return {
        "wins": wins,
        "draws": draws,
        "losses": losses,
        "non_loss_rate": (wins + draws) / total if total > 0 else 0,
        "records": records,
    }
