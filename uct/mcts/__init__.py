"""
Monte Carlo Tree Search モジュール

UCT方式のMCTS実装を提供（アリーナ確保のノード、近似対数、対局ドライバ）
"""

from .arena import Arena
from .exceptions import (
    ArenaError,
    ConfigError,
    InvalidMoveError,
    InvariantError,
    SearchError,
    UnexpandedMoveError,
)
from .fastlog import fastlog, fastlog2
from .game import Game, Outcome
from .node import Node, new_arena
from .parallel import RootParallelSearch
from .search import GameRecord, SearchDriver, play_vs_random

__all__ = [
    "Arena",
    "ArenaError",
    "ConfigError",
    "Game",
    "GameRecord",
    "InvalidMoveError",
    "InvariantError",
    "Node",
    "Outcome",
    "RootParallelSearch",
    "SearchDriver",
    "SearchError",
    "UnexpandedMoveError",
    "fastlog",
    "fastlog2",
    "new_arena",
    "play_vs_random",
]
