"""
評価システムモジュール

MCTSの強さを測定するための対戦・評価機能を提供
"""

from .players import (
    Player,
    RandomPlayer,
    MCTSPlayer,
)
from .match import (
    MatchRunner,
    MatchResult,
    evaluate_player,
    evaluate_search,
    summarize_results,
)

__all__ = [
    "Player",
    "RandomPlayer",
    "MCTSPlayer",
    "MatchRunner",
    "MatchResult",
    "evaluate_player",
    "evaluate_search",
    "summarize_results",
]
