"""
MCTSノード定義

UCT方式のMCTSで使用する木構造のノードクラス
ノード本体はアリーナが所有し、子ノードへのリンクはアリーナのハンドル（整数）で持つ
"""

import logging
from typing import Dict, Generic, Tuple

import numpy as np

from .arena import Arena, DEFAULT_BLOCK_SIZE
from .exceptions import InvalidMoveError, InvariantError, SearchError, UnexpandedMoveError
from .fastlog import fastlog
from .game import G, Outcome

logger = logging.getLogger(__name__)

NO_CHILD = -1
LOG_EPSILON = 1e-4


class Node(Generic[G]):
    """
    MCTSの木構造ノード

    各ノードは以下の情報を保持:
    - 局面 (state)
    - 着手ごとの試行回数 (tries) と勝ち数 (wins)
    - 子ノードのハンドル (children, 未展開は -1)

    不変条件:
        children[m] >= 0  <=>  tries[m] > 0
        tot_tries == sum(tries)

    UCB式:
        sign * wins[m] / tries[m] + sqrt(2 * ln(tot_tries) / tries[m])

    sign はプレイヤー0なら +1、プレイヤー1なら -1（勝ち数は常にプレイヤー0視点）
    """

    __slots__ = (
        "state", "arena", "handle", "outcome", "valid",
        "children", "child_outcomes", "tries", "wins", "tot_tries",
    )

    def __init__(self, state: G, arena: Arena):
        """
        Args:
            state: このノードの局面
            arena: このノードを所有するアリーナ

        直接呼ばずに Node.create() を使うこと
        """
        n_moves = state.n_moves

        self.state = state
        self.arena = arena
        self.handle = NO_CHILD
        self.outcome = Outcome(state.winner())

        # 局面は不変なので合法手マスクは作成時に一度だけ計算する
        self.valid = np.fromiter(
            (state.is_valid(m) for m in range(n_moves)), dtype=bool, count=n_moves
        )

        # 子ノードへのリンク（所有はしない）
        self.children = np.full(n_moves, NO_CHILD, dtype=np.int64)
        self.child_outcomes = np.full(n_moves, int(Outcome.NONE), dtype=np.int8)

        # 統計情報
        self.tries = np.zeros(n_moves, dtype=np.float64)
        self.wins = np.zeros(n_moves, dtype=np.float64)
        self.tot_tries = 0.0

    @classmethod
    def create(cls, arena: Arena, state: G) -> "Node[G]":
        """
        アリーナ上にノードを確保する

        Args:
            arena: 確保先のアリーナ
            state: ノードの局面

        Returns:
            Node: 確保されたノード
        """
        handle = arena.alloc(state, arena)
        node = arena[handle]
        node.handle = handle
        return node

    @property
    def n_moves(self) -> int:
        return len(self.tries)

    def is_leaf(self) -> bool:
        """終局ノードかどうか"""
        return self.outcome != Outcome.NONE

    def is_move_explored(self, move: int) -> bool:
        """着手moveが展開済みか"""
        self._check_range(move)
        return self.children[move] != NO_CHILD

    def child(self, move: int) -> "Node[G]":
        """
        展開済みの子ノードを取得

        Raises:
            UnexpandedMoveError: moveが未展開の場合
        """
        self._check_range(move)
        handle = int(self.children[move])
        if handle == NO_CHILD:
            raise UnexpandedMoveError(
                "move has not been expanded", context={"move": move, "node": self.handle}
            )
        return self.arena[handle]

    def n_unplayed_moves(self) -> int:
        """まだ一度も試していない合法手の数"""
        return int(np.count_nonzero(self.valid & (self.tries == 0)))

    def rollout(self, rng: np.random.Generator) -> Outcome:
        """
        UCT方策で1回ロールアウトする

        未展開の手が残っていればランダムロールアウト、
        すべて展開済みならUCBで選んだ子に潜る。
        統計は自分の着手分だけ更新する（上位ノードは呼び出し元が更新する）

        Args:
            rng: 乱数生成器

        Returns:
            Outcome: 終局時の勝敗
        """
        if self.is_leaf():
            return self.outcome

        # random_rollout が統計を更新する
        if self.n_unplayed_moves() > 0:
            return self.random_rollout(rng)

        move = self.ucb_move()
        outcome = self.child(move).rollout(rng)
        self._update(move, outcome)
        return outcome

    def random_rollout(self, rng: np.random.Generator) -> Outcome:
        """
        終局までランダムに着手する（UCT論文の "simulation"）

        通過した各ノードで未試行の手を1つ展開する

        Args:
            rng: 乱数生成器

        Returns:
            Outcome: 終局時の勝敗
        """
        if self.is_leaf():
            return self.outcome

        move = self.random_unplayed_move(rng)
        return self._expand(move, rng)

    def random_move(self, rng: np.random.Generator) -> int:
        """合法手の中から一様ランダムに選ぶ（展開状態は問わない）"""
        moves = np.flatnonzero(self.valid)
        if moves.size == 0:
            raise SearchError("no valid moves", context={"node": self.handle})
        return int(moves[rng.integers(moves.size)])

    def random_unplayed_move(self, rng: np.random.Generator) -> int:
        """未試行の合法手から一様ランダムに選ぶ"""
        moves = np.flatnonzero(self.valid & (self.tries == 0))
        if moves.size == 0:
            raise SearchError("no unplayed moves remain", context={"node": self.handle})
        return int(moves[rng.integers(moves.size)])

    def ucb_move(self) -> int:
        """
        UCB (upper confidence bound) 方策で着手を選択

        子ノードが即勝ち（プレイヤー1なら即LOSS）の終局なら、その手を即座に返す。
        それ以外はUCB値が最大の手を返す。同値なら番号の小さい手を優先する

        Returns:
            int: 選択された着手

        Raises:
            UnexpandedMoveError: 未展開の合法手が残っている場合
        """
        if self.n_unplayed_moves() > 0:
            raise UnexpandedMoveError(
                "ucb_move requires a fully expanded node",
                context={"node": self.handle, "unplayed": self.n_unplayed_moves()},
            )

        moves = np.flatnonzero(self.valid)
        if moves.size == 0:
            raise SearchError("no valid moves", context={"node": self.handle})

        player = self.state.player_turn()

        # 子が自分の勝ちで終局しているなら探索不要
        target = Outcome.WIN if player == 0 else Outcome.LOSS
        winning = moves[self.child_outcomes[moves] == int(target)]
        if winning.size > 0:
            return int(winning[0])

        flip = 1.0 if player == 0 else -1.0
        tries = self.tries[moves]
        log_total = max(fastlog(self.tot_tries + LOG_EPSILON), 0.0)

        scores = flip * self.wins[moves] / tries + np.sqrt(2.0 * log_total / tries)

        # argmax は最初の最大値を返す
        return int(moves[np.argmax(scores)])

    def ensure_child(self, move: int, rng: np.random.Generator) -> "Node[G]":
        """
        子ノードを取得し、未展開ならその手でランダムロールアウトして展開する

        ランダム方策の相手が未展開の手を選んだときに使う。
        展開時に統計も更新するので不変条件は保たれる

        Args:
            move: 着手
            rng: 乱数生成器

        Returns:
            Node: 子ノード
        """
        self._check_range(move)
        if not self.valid[move]:
            raise InvalidMoveError(
                "move is not valid in this state", context={"move": move, "node": self.handle}
            )

        if self.children[move] == NO_CHILD:
            logger.debug("expanding move %d on demand at node %d", move, self.handle)
            self._expand(move, rng)

        return self.child(move)

    def clone(self, target_arena: Arena) -> "Node[G]":
        """
        このノード以下の部分木を target_arena に複製する

        深い木でも再帰しないよう明示的なスタックで辿る

        Args:
            target_arena: 複製先のアリーナ（同じアリーナでもよい）

        Returns:
            Node: 複製された部分木のルート
        """
        root = Node.create(target_arena, self.state)
        root._copy_statistics(self)

        stack = [(self, root)]
        while stack:
            src, dst = stack.pop()
            for move in np.flatnonzero(src.children != NO_CHILD):
                src_child = src.arena[int(src.children[move])]
                dst_child = Node.create(target_arena, src_child.state)
                dst_child._copy_statistics(src_child)
                dst.children[move] = dst_child.handle
                stack.append((src_child, dst_child))

        return root

    def move_statistics(self) -> Dict[int, Tuple[float, float]]:
        """
        展開済みの手の統計を取得

        Returns:
            Dict[int, Tuple[float, float]]: {move: (tries, wins)}
        """
        return {
            int(m): (float(self.tries[m]), float(self.wins[m]))
            for m in np.flatnonzero(self.tries > 0)
        }

    def check_invariants(self):
        """統計の不変条件を検査する（診断・テスト用）"""
        if self.tot_tries != float(self.tries.sum()):
            raise InvariantError(
                "tot_tries does not match the sum of tries",
                context={"tot_tries": self.tot_tries, "sum": float(self.tries.sum())},
            )
        if not np.array_equal(self.children != NO_CHILD, self.tries > 0):
            raise InvariantError(
                "children and tries disagree on expanded moves", context={"node": self.handle}
            )
        if np.any(self.tries[~self.valid] > 0):
            raise InvariantError("invalid move has been tried", context={"node": self.handle})

    def _expand(self, move: int, rng: np.random.Generator) -> Outcome:
        child = Node.create(self.arena, self.state.move(move))
        outcome = child.random_rollout(rng)

        assert self.children[move] == NO_CHILD
        self.children[move] = child.handle
        self.child_outcomes[move] = int(child.outcome)
        self._update(move, outcome)
        return outcome

    def _update(self, move: int, outcome: Outcome):
        if outcome == Outcome.NONE:
            raise InvariantError("cannot record a non-terminal outcome", context={"move": move})
        self.tries[move] += 1.0
        self.tot_tries += 1.0
        self.wins[move] += float(outcome)

    def _copy_statistics(self, other: "Node[G]"):
        self.tries[:] = other.tries
        self.wins[:] = other.wins
        self.tot_tries = other.tot_tries
        self.child_outcomes[:] = other.child_outcomes

    def _check_range(self, move: int):
        if not 0 <= move < self.n_moves:
            raise InvalidMoveError(
                "move index out of range", context={"move": move, "n_moves": self.n_moves}
            )

    def __repr__(self) -> str:
        """デバッグ用の文字列表現"""
        return (f"Node(handle={self.handle}, "
                f"player={self.state.player_turn()}, "
                f"outcome={self.outcome.name}, "
                f"N={self.tot_tries:.0f}, "
                f"expanded={int(np.count_nonzero(self.children != NO_CHILD))}/"
                f"{int(np.count_nonzero(self.valid))})")


def new_arena(block_size: int = DEFAULT_BLOCK_SIZE) -> Arena:
    """Node用のアリーナを作成"""
    return Arena(Node, block_size=block_size)
