"""MCTSのベンチマーク

初期局面からのロールアウト速度（rollouts/sec）と、近似対数の速度を計測する。

使用方法:
    uv run python benchmark.py
"""

import math
import time

import numpy as np

from uct.games import TicTacToe
from uct.mcts.fastlog import fastlog
from uct.mcts.node import Node, new_arena


def benchmark_rollouts(num_rollouts: int = 100000, seed: int = 0) -> None:
    """ロールアウト速度の計測

    Args:
        num_rollouts: ロールアウト回数
        seed: 乱数シード
    """
    print(f"=== 三目並べ MCTS ロールアウト ベンチマーク ===")
    print(f"ロールアウト数: {num_rollouts:,}")
    print()

    rng = np.random.default_rng(seed)
    arena = new_arena()
    root = Node.create(arena, TicTacToe())

    # ウォームアップ
    print("ウォームアップ中...")
    for _ in range(1000):
        root.rollout(rng)

    print("計測中...")
    start_time = time.perf_counter()

    for _ in range(num_rollouts):
        root.rollout(rng)

    elapsed_time = time.perf_counter() - start_time

    print()
    print("=== 結果 ===")
    print(f"経過時間:       {elapsed_time:.2f} 秒")
    print(f"ロールアウト速度: {num_rollouts / elapsed_time:,.0f} rollouts/sec")
    print(f"確保ノード数:    {len(arena):,} ({arena.num_blocks} blocks)")
    print(f"ルートの選択手:  {root.ucb_move()}")
    print()

    arena.clear()


def benchmark_fastlog(iterations: int = 100000) -> None:
    """近似対数と math.log の比較"""
    print("=== 対数ベンチマーク ===")

    values = np.random.default_rng(0).uniform(1.0, 1e6, size=iterations)
    scalars = values.tolist()

    start = time.perf_counter()
    for v in scalars:
        math.log(v)
    elapsed = time.perf_counter() - start
    print(f"math.log (scalar):    {iterations / elapsed:,.0f} calls/sec")

    start = time.perf_counter()
    for v in scalars[:10000]:
        fastlog(v)
    elapsed = time.perf_counter() - start
    print(f"fastlog (scalar):     {10000 / elapsed:,.0f} calls/sec")

    start = time.perf_counter()
    approx = fastlog(values)
    elapsed = time.perf_counter() - start
    print(f"fastlog (vectorized): {iterations / elapsed:,.0f} values/sec")

    max_error = float(np.max(np.abs(approx - np.log(values))))
    print(f"最大絶対誤差:         {max_error:.2e}")


if __name__ == "__main__":
    benchmark_rollouts(100000)
    benchmark_fastlog()
