"""
探索エンジンの例外定義

すべて呼び出し側の前提条件違反を表す。エンジン内部では捕捉せず即座に送出する
"""

from typing import Any, Dict, Optional


class SearchError(Exception):
    """
    探索エンジン例外の基底クラス

    Attributes:
        message: エラー内容
        context: デバッグ用の追加情報
    """
    code: str = "SEARCH_ERROR"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"


class UnexpandedMoveError(SearchError):
    """未展開の手が残っている状態でUCB選択した、または未展開の子を参照した"""
    code: str = "UNEXPANDED_MOVE"


class InvalidMoveError(SearchError, ValueError):
    """範囲外、または現在の局面で非合法な着手"""
    code: str = "INVALID_MOVE"


class InvariantError(SearchError):
    """ノード統計の不変条件が崩れている"""
    code: str = "INVARIANT_VIOLATION"


class ArenaError(SearchError, IndexError):
    """未発行、または解放済みのハンドル"""
    code: str = "ARENA_HANDLE"


class ConfigError(SearchError):
    """設定ファイルの読み込み・検証エラー"""
    code: str = "CONFIG_ERROR"
