"""
対局ドライバ

MCTSエージェント vs ランダムエージェントの1局を最後まで進め、
局面履歴と着手履歴を返す
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional

import numpy as np

from .arena import DEFAULT_BLOCK_SIZE
from .exceptions import SearchError
from .game import G, Outcome
from .node import Node, new_arena

logger = logging.getLogger(__name__)


@dataclass
class GameRecord(Generic[G]):
    """
    1局分の記録

    Attributes:
        states: 初期局面から終局までの局面列
        moves: 各局面で選ばれた着手（len(states) - 1 個）
        outcome: 木の終局ノードが報告した勝敗
    """
    states: List[G] = field(default_factory=list)
    moves: List[int] = field(default_factory=list)
    outcome: Outcome = Outcome.NONE

    @property
    def num_moves(self) -> int:
        return len(self.moves)


class SearchDriver(Generic[G]):
    """
    MCTSエージェントとランダムエージェントの対局を管理する

    探索側の手番では num_rollouts 回ロールアウトしてからUCBで着手し、
    相手側の手番では合法手から一様ランダムに着手する。
    木は1局を通して再利用し、着手ごとにルートを子ノードへ進める
    """

    def __init__(
        self,
        game_factory: Callable[[], G],
        num_rollouts: int = 1000,
        rng: Optional[np.random.Generator] = None,
        search_player: int = 0,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        """
        Args:
            game_factory: 初期局面を返す関数（ゲームクラスそのものでよい）
            num_rollouts: 1手あたりのロールアウト回数
            rng: 乱数生成器（省略時はシードなし）
            search_player: MCTSで着手するプレイヤー (0 or 1)
            block_size: アリーナのブロックサイズ
        """
        if num_rollouts < 1:
            raise ValueError(f"num_rollouts must be positive, got {num_rollouts}")
        if search_player not in (0, 1):
            raise ValueError(f"search_player must be 0 or 1, got {search_player}")

        self.game_factory = game_factory
        self.num_rollouts = num_rollouts
        self.rng = rng if rng is not None else np.random.default_rng()
        self.search_player = search_player
        self.arena = new_arena(block_size)

    def new_root(self, state: Optional[G] = None) -> Node[G]:
        """
        アリーナ上にルートノードを作成

        Args:
            state: ルートの局面（省略時は初期局面）
        """
        if state is None:
            state = self.game_factory()
        return Node.create(self.arena, state)

    def best_move(self, node: Node[G]) -> int:
        """
        ロールアウトを num_rollouts 回実行し、UCBで最良の手を返す

        予算が合法手数より少なく未展開の手が残った場合は、
        すべて展開されるまでランダムロールアウトを追加する

        Args:
            node: 探索する局面のノード

        Returns:
            int: 選択された着手
        """
        if node.is_leaf():
            raise SearchError("cannot search a terminal position", context={"node": node.handle})

        for _ in range(self.num_rollouts):
            node.rollout(self.rng)

        while node.n_unplayed_moves() > 0:
            node.random_rollout(self.rng)

        return node.ucb_move()

    def play(self) -> GameRecord[G]:
        """
        1局を最後まで対局する

        Returns:
            GameRecord: 局面履歴と着手履歴
        """
        tree = self.new_root()
        record: GameRecord[G] = GameRecord(states=[tree.state])

        try:
            while not tree.is_leaf():
                player = tree.state.player_turn()

                if player == self.search_player:
                    move = self.best_move(tree)
                    logger.debug(
                        "search player %d chose move %d after %.0f tries",
                        player, move, tree.tot_tries,
                    )
                    tree = tree.child(move)
                else:
                    move = tree.random_move(self.rng)
                    logger.debug("random player %d chose move %d", player, move)
                    tree = tree.ensure_child(move, self.rng)

                record.moves.append(move)
                record.states.append(tree.state)

            # 終局ノードのロールアウトは統計を変えずに勝敗だけを返す
            record.outcome = tree.rollout(self.rng)
        finally:
            logger.debug("game finished with %d nodes allocated", len(self.arena))
            self.arena.clear()

        logger.info(
            "game over after %d moves: %s", record.num_moves, record.outcome.name
        )
        return record


def play_vs_random(
    game_factory: Callable[[], G],
    rng: np.random.Generator,
    num_rollouts: int,
) -> GameRecord[G]:
    """
    MCTSエージェント（先手）とランダムエージェントで1局対戦する

    Args:
        game_factory: 初期局面を返す関数
        rng: 乱数生成器
        num_rollouts: 1手あたりのロールアウト回数

    Returns:
        GameRecord: 局面履歴と着手履歴
    """
    driver = SearchDriver(game_factory, num_rollouts=num_rollouts, rng=rng)
    return driver.play()
