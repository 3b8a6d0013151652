"""
アリーナアロケータ

固定容量のブロックを追記していくだけの単一型メモリプール。
要素は整数ハンドルで参照し、ブロックは一度確保したら移動・縮小しない。
個別の解放はなく、clear() で全要素をまとめて解放する
"""

import logging
from typing import Any, Callable, Generic, List, TypeVar

from .exceptions import ArenaError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BLOCK_SIZE = 4096


class Arena(Generic[T]):
    """
    追記専用のブロックプール

    ハンドル h は (h // block_size) 番目のブロックの (h % block_size) 番目を指す。
    新しいブロックを足すだけで既存ブロックは触らないため、発行済みハンドルは
    clear() まで常に同じオブジェクトを指す

    使用例:
        arena = Arena(dict)
        h = arena.alloc(a=1)
        arena[h]["a"]  # -> 1
    """

    def __init__(self, factory: Callable[..., T], block_size: int = DEFAULT_BLOCK_SIZE):
        """
        Args:
            factory: 要素のコンストラクタ（alloc の引数がそのまま渡される）
            block_size: 1ブロックあたりの要素数
        """
        if block_size < 1:
            raise ValueError(f"block_size must be positive, got {block_size}")

        self.factory = factory
        self.block_size = block_size
        self.generation = 0

        self._blocks: List[List[T]] = []
        self._size = 0

    def alloc(self, *args: Any, **kwargs: Any) -> int:
        """
        要素を1つ構築してハンドルを返す

        Returns:
            int: 新しい要素のハンドル
        """
        if not self._blocks or len(self._blocks[-1]) == self.block_size:
            self._blocks.append([])
            logger.debug(
                "arena opened block %d (block_size=%d, elements=%d)",
                len(self._blocks), self.block_size, self._size,
            )

        self._blocks[-1].append(self.factory(*args, **kwargs))
        handle = self._size
        self._size += 1
        return handle

    def get(self, handle: int) -> T:
        """ハンドルから要素を取得"""
        if handle < 0 or handle >= self._size:
            raise ArenaError(
                "handle is not live in this arena",
                context={"handle": handle, "size": self._size, "generation": self.generation},
            )
        block, offset = divmod(handle, self.block_size)
        return self._blocks[block][offset]

    __getitem__ = get

    def clear(self):
        """全要素を解放する。発行済みハンドルはすべて無効になる"""
        logger.debug(
            "arena cleared: %d elements in %d blocks (generation %d)",
            self._size, len(self._blocks), self.generation,
        )
        self._blocks.clear()
        self._size = 0
        self.generation += 1

    @property
    def num_blocks(self) -> int:
        """確保済みブロック数"""
        return len(self._blocks)

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return (f"Arena(size={self._size}, "
                f"blocks={len(self._blocks)}, "
                f"block_size={self.block_size}, "
                f"generation={self.generation})")
