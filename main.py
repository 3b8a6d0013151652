"""
UCT MCTS - CLIエントリポイント

対局・評価用のコマンドラインインターフェース
"""

import argparse
import json
import logging
from datetime import datetime
from pathlib import Path

import numpy as np

from uct.config import EngineConfig, apply_overrides, load_config
from uct.games import GAMES
from uct.mcts.game import Outcome
from uct.mcts.search import SearchDriver


def setup_logging(config: EngineConfig):
    """
    ロガーを設定

    Args:
        config: 設定
    """
    logging.basicConfig(
        level=config.system.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def resolve_seed(args, config: EngineConfig) -> int:
    """
    乱数シードを決定（引数 > 設定ファイル > ランダム）

    Args:
        args: argparseの引数
        config: 設定

    Returns:
        int: シード値
    """
    if args.seed is not None:
        return args.seed
    if config.system.seed is not None:
        return config.system.seed
    return int(np.random.SeedSequence().entropy % (2 ** 32))


def collect_overrides(args) -> dict:
    """コマンドライン引数から設定の上書き内容を集める（未指定は None）"""
    return {
        "search": {
            "num_rollouts": getattr(args, 'rollouts', None),
            "num_trees": getattr(args, 'parallel_trees', None),
        },
        "eval": {
            "num_games": getattr(args, 'games', None),
            "verbose": True if getattr(args, 'verbose', False) else None,
        },
    }


def play_command(args, config: EngineConfig):
    """
    対局コマンド（MCTS vs ランダム を1局）

    Args:
        args: argparseの引数
        config: 設定
    """
    seed = resolve_seed(args, config)
    print(f"Random seed: {seed}")

    driver = SearchDriver(
        GAMES[config.search.game],
        num_rollouts=config.search.num_rollouts,
        rng=np.random.default_rng(seed),
        search_player=config.search.search_player,
        block_size=config.search.block_size,
    )
    record = driver.play()

    for state in record.states:
        print(f"{state}\n")

    winner = record.outcome
    if winner == Outcome.TIE:
        print("Tie game")
    else:
        print(f"player {0 if winner == Outcome.WIN else 1} wins")


def eval_command(args, config: EngineConfig):
    """
    評価コマンド（シードを変えて複数局対局し、負けなかった割合を測る）

    Args:
        args: argparseの引数
        config: 設定
    """
    from uct.eval.match import evaluate_search

    seed = resolve_seed(args, config)
    seeds = list(range(seed, seed + config.eval.num_games))

    print("=" * 70)
    print("Search Evaluation")
    print("=" * 70)
    print(f"\nGame: {config.search.game}")
    print(f"Games: {config.eval.num_games} (seeds {seeds[0]}..{seeds[-1]})")
    print(f"Rollouts per move: {config.search.num_rollouts}")
    print(f"Search player: {config.search.search_player}")

    eval_result = evaluate_search(
        GAMES[config.search.game],
        seeds,
        num_rollouts=config.search.num_rollouts,
        search_player=config.search.search_player,
        block_size=config.search.block_size,
    )

    print(f"\nWins: {eval_result['wins']}")
    print(f"Draws: {eval_result['draws']}")
    print(f"Losses: {eval_result['losses']}")
    print(f"Non-loss Rate: {eval_result['non_loss_rate'] * 100:.1f}%")

    # 結果を保存（オプション）
    if args.save_results:
        output_dir = Path("data/eval")
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        result_file = output_dir / f"eval_{timestamp}.json"

        eval_data = {
            "timestamp": datetime.now().isoformat(),
            "config": config.model_dump(),
            "seeds": seeds,
            "wins": eval_result["wins"],
            "draws": eval_result["draws"],
            "losses": eval_result["losses"],
            "non_loss_rate": eval_result["non_loss_rate"],
            "moves": {str(s): r.moves for s, r in eval_result["records"].items()},
        }

        with open(result_file, "w") as f:
            json.dump(eval_data, f, indent=2)

        print(f"\nResults saved to: {result_file}")

    print("\n" + "=" * 70)


def match_command(args, config: EngineConfig):
    """
    対戦コマンド（MCTSPlayer vs RandomPlayer、先後交代）

    Args:
        args: argparseの引数
        config: 設定
    """
    from uct.eval.match import evaluate_player
    from uct.eval.players import MCTSPlayer, RandomPlayer

    seed = resolve_seed(args, config)
    rng = np.random.default_rng(seed)
    mcts_rng, random_rng = rng.spawn(2)

    ai_player = MCTSPlayer(
        num_rollouts=config.search.num_rollouts,
        rng=mcts_rng,
        num_trees=config.search.num_trees,
        block_size=config.search.block_size,
    )
    opponent = RandomPlayer(name="Random", rng=random_rng)

    print(f"Random seed: {seed}")
    print(f"{ai_player.name} vs {opponent.name}, {config.eval.num_games} games\n")

    eval_result = evaluate_player(
        GAMES[config.search.game],
        ai_player,
        opponent,
        num_games=config.eval.num_games,
        verbose=config.eval.verbose,
    )

    print(f"Result vs {opponent.name}:")
    print(f"  Win Rate: {eval_result['win_rate'] * 100:.1f}%")
    print(f"  Draw Rate: {eval_result['draw_rate'] * 100:.1f}%")
    print(f"  Loss Rate: {eval_result['loss_rate'] * 100:.1f}%")
    print(f"  Avg Moves: {eval_result['avg_moves']:.1f}")
    print(f"  Avg Duration: {eval_result['avg_duration']:.2f}s")

    # 先手・後手別の成績
    for seat, counts in eval_result["by_seat"].items():
        if counts["games"] == 0:
            continue
        print(
            f"  As player {seat}: {counts['wins']}W {counts['draws']}D {counts['losses']}L "
            f"({counts['games']} games)"
        )


def main():
    """メインエントリポイント"""
    parser = argparse.ArgumentParser(description="UCT Monte Carlo Tree Search - CLI")
    parser.add_argument(
        '--config',
        type=str,
        default='configs/default.yaml',
        help='Path to config file (default: configs/default.yaml)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Play コマンド
    play_parser = subparsers.add_parser('play', help='Play one game: MCTS vs random')
    play_parser.add_argument('seed', type=int, nargs='?', default=None, help='Random seed')
    play_parser.add_argument('--rollouts', type=int, help='Rollouts per move')
    play_parser.set_defaults(func=play_command)

    # Eval コマンド
    eval_parser = subparsers.add_parser('eval', help='Evaluate MCTS vs random over many seeds')
    eval_parser.add_argument('--seed', type=int, help='First seed of the sweep')
    eval_parser.add_argument('--games', type=int, help='Number of games (one per seed)')
    eval_parser.add_argument('--rollouts', type=int, help='Rollouts per move')
    eval_parser.add_argument(
        '--save-results',
        action='store_true',
        help='Save evaluation results to JSON file'
    )
    eval_parser.set_defaults(func=eval_command)

    # Match コマンド
    match_parser = subparsers.add_parser('match', help='MCTS player vs random player')
    match_parser.add_argument('--seed', type=int, help='Random seed')
    match_parser.add_argument('--games', type=int, help='Number of games')
    match_parser.add_argument('--rollouts', type=int, help='Rollouts per move (per tree)')
    match_parser.add_argument('--parallel-trees', type=int, help='Trees for root parallelization')
    match_parser.add_argument('--verbose', action='store_true', help='Show detailed game progress')
    match_parser.set_defaults(func=match_command)

    args = parser.parse_args()

    if not hasattr(args, 'func'):
        parser.print_help()
        return

    config = load_config(args.config)
    config = apply_overrides(config, collect_overrides(args))
    setup_logging(config)

    args.func(args, config)


if __name__ == "__main__":
    main()
