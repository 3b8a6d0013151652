"""
ルート並列化 (root parallelization)

独立した木を複数作り、それぞれ専用のアリーナで探索してから
着手直前に一度だけ統計をマージする。
探索中は木同士で何も共有しないため、ロックは不要

参考: Chaslot et al., "Parallel Monte-Carlo Tree Search", 2008
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import numpy as np

from .arena import DEFAULT_BLOCK_SIZE
from .exceptions import SearchError
from .game import Outcome
from .node import Node, new_arena

logger = logging.getLogger(__name__)


def _search_tree(tree: Node, rng: np.random.Generator, num_rollouts: int) -> Node:
    """1本の木を探索する（ワーカースレッドで実行）"""
    for _ in range(num_rollouts):
        tree.rollout(rng)
    return tree


class RootParallelSearch:
    """
    ルート並列化MCTS

    ルートを num_trees 本の専用アリーナに複製し、各木を独立に探索する。
    マージは試行回数と勝ち数の合計で、試行回数が最大の手を選ぶ
    """

    def __init__(
        self,
        num_trees: int = 4,
        num_rollouts: int = 1000,
        max_workers: Optional[int] = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        """
        Args:
            num_trees: 独立に探索する木の数
            num_rollouts: 木1本あたりのロールアウト回数
            max_workers: スレッド数（省略時は num_trees）
            block_size: 各アリーナのブロックサイズ
        """
        if num_trees < 1:
            raise ValueError(f"num_trees must be positive, got {num_trees}")
        if num_rollouts < 1:
            raise ValueError(f"num_rollouts must be positive, got {num_rollouts}")

        self.num_trees = num_trees
        self.num_rollouts = num_rollouts
        self.max_workers = max_workers or num_trees
        self.block_size = block_size

        # 直近の探索でマージした統計 {move: (tries, wins)}
        self.merged_statistics: Dict[int, Tuple[float, float]] = {}

    def best_move(self, root: Node, rng: np.random.Generator) -> int:
        """
        複数の木で探索し、マージした統計から着手を選ぶ

        root 自体は変更しない

        Args:
            root: 探索する局面のノード
            rng: 各木の乱数生成器を派生させる元

        Returns:
            int: 選択された着手
        """
        if root.is_leaf():
            raise SearchError("cannot search a terminal position", context={"node": root.handle})

        arenas = [new_arena(self.block_size) for _ in range(self.num_trees)]
        trees = [root.clone(arena) for arena in arenas]
        rngs = rng.spawn(self.num_trees)

        try:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(_search_tree, tree, tree_rng, self.num_rollouts)
                    for tree, tree_rng in zip(trees, rngs)
                ]
                searched = [future.result() for future in futures]

            move = self._merge(root, searched)
        finally:
            for arena in arenas:
                arena.clear()

        logger.debug(
            "root parallel search over %d trees chose move %d", self.num_trees, move
        )
        return move

    def _merge(self, root: Node, trees: List[Node]) -> int:
        merged: Dict[int, Tuple[float, float]] = {}
        for tree in trees:
            for move, (tries, wins) in tree.move_statistics().items():
                total_tries, total_wins = merged.get(move, (0.0, 0.0))
                merged[move] = (total_tries + tries, total_wins + wins)

        self.merged_statistics = dict(sorted(merged.items()))

        # 即勝ちの手は統計に関係なく選ぶ
        target = Outcome.WIN if root.state.player_turn() == 0 else Outcome.LOSS
        for move in np.flatnonzero(root.valid):
            if Outcome(root.state.move(int(move)).winner()) == target:
                return int(move)

        # 試行回数が同じなら番号の小さい手
        return max(self.merged_statistics, key=lambda m: self.merged_statistics[m][0])
