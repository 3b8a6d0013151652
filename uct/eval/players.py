"""
プレイヤークラス

評価用のプレイヤーを実装:
- RandomPlayer: ランダムに着手
- MCTSPlayer: UCT方式のMCTS
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from uct.mcts.arena import DEFAULT_BLOCK_SIZE
from uct.mcts.game import Game
from uct.mcts.parallel import RootParallelSearch
from uct.mcts.search import SearchDriver


class Player(ABC):
    """
    プレイヤーの基底クラス
    """

    def __init__(self, name: str):
        """
        Args:
            name: プレイヤー名
        """
        self.name = name

    @abstractmethod
    def get_action(self, state: Game) -> int:
        """
        着手を選択

        Args:
            state: 現在の局面

        Returns:
            int: 着手 (0 <= move < n_moves)
        """
        pass

    def reset(self):
        """ゲーム開始時の初期化（必要に応じてオーバーライド）"""
        pass


class RandomPlayer(Player):
    """
    ランダムプレイヤー

    合法手の中からランダムに選択
    """

    def __init__(self, name: str = "Random", rng: Optional[np.random.Generator] = None):
        super().__init__(name)
        self.rng = rng if rng is not None else np.random.default_rng()

    def get_action(self, state: Game) -> int:
        """ランダムに着手を選択"""
        legal_moves = [m for m in range(state.n_moves) if state.is_valid(m)]
        return int(legal_moves[self.rng.integers(len(legal_moves))])


class MCTSPlayer(Player):
    """
    MCTSベースのAIプレイヤー

    着手ごとに新しいアリーナで木を作り、探索後にまとめて解放する。
    num_trees > 1 ならルート並列化で探索する
    """

    def __init__(
        self,
        num_rollouts: int = 1000,
        rng: Optional[np.random.Generator] = None,
        num_trees: int = 1,
        block_size: int = DEFAULT_BLOCK_SIZE,
        name: Optional[str] = None,
    ):
        """
        Args:
            num_rollouts: 1手あたり（並列時は木1本あたり）のロールアウト回数
            rng: 乱数生成器
            num_trees: ルート並列化の木の数
            block_size: アリーナのブロックサイズ
            name: プレイヤー名
        """
        if name is None:
            name = f"MCTS-{num_rollouts}" if num_trees == 1 else f"MCTS-{num_trees}x{num_rollouts}"

        super().__init__(name)

        self.num_rollouts = num_rollouts
        self.rng = rng if rng is not None else np.random.default_rng()
        self.block_size = block_size

        self.parallel = None
        if num_trees > 1:
            self.parallel = RootParallelSearch(
                num_trees=num_trees,
                num_rollouts=num_rollouts,
                block_size=block_size,
            )

    def get_action(self, state: Game) -> int:
        """MCTSで最良の手を選択"""
        driver = SearchDriver(
            type(state),
            num_rollouts=self.num_rollouts,
            rng=self.rng,
            block_size=self.block_size,
        )

        try:
            root = driver.new_root(state)
            if self.parallel is not None:
                return self.parallel.best_move(root, self.rng)
            return driver.best_move(root)
        finally:
            driver.arena.clear()
