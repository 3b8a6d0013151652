"""
設定ファイルの読み込み

YAMLの設定をPydanticモデルで検証して返す
"""

from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from uct.mcts.arena import DEFAULT_BLOCK_SIZE
from uct.mcts.exceptions import ConfigError


class SearchConfig(BaseModel):
    """探索設定"""

    model_config = ConfigDict(validate_assignment=True)

    game: Literal["tictactoe"] = Field(default="tictactoe", description="対局するゲーム")
    num_rollouts: int = Field(default=1000, ge=1, description="1手あたりのロールアウト回数")
    block_size: int = Field(default=DEFAULT_BLOCK_SIZE, ge=1, description="アリーナのブロックサイズ")
    search_player: int = Field(default=0, ge=0, le=1, description="MCTSで着手するプレイヤー (0=先手)")
    num_trees: int = Field(default=1, ge=1, description="ルート並列化の木の数 (1=並列化なし)")


class EvalConfig(BaseModel):
    """評価設定"""

    model_config = ConfigDict(validate_assignment=True)

    num_games: int = Field(default=20, ge=1, description="評価の対局数")
    verbose: bool = Field(default=False, description="対局ごとの詳細を表示するか")


class SystemConfig(BaseModel):
    """システム設定"""

    model_config = ConfigDict(validate_assignment=True)

    seed: Optional[int] = Field(default=None, ge=0, description="乱数シード (None=ランダム)")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="ログレベル"
    )


class EngineConfig(BaseModel):
    """設定全体"""

    model_config = ConfigDict(validate_assignment=True)

    search: SearchConfig = Field(default_factory=SearchConfig)
    eval: EvalConfig = Field(default_factory=EvalConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)


def load_config(config_path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    YAML設定ファイルを読み込む

    Args:
        config_path: 設定ファイルのパス（None またはファイルが無ければデフォルト値）

    Returns:
        EngineConfig: 検証済みの設定

    Raises:
        ConfigError: YAMLの構文エラー、または値の検証エラー
    """
    if config_path is None or not Path(config_path).exists():
        return EngineConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError("failed to parse config file", context={"path": str(config_path)}) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("config root must be a mapping", context={"path": str(config_path)})

    try:
        return EngineConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(
            "invalid config values",
            context={"path": str(config_path), "errors": e.error_count()},
        ) from e


def apply_overrides(
    config: EngineConfig,
    overrides: Dict[str, Dict[str, Any]],
) -> EngineConfig:
    """
    コマンドライン引数などで設定を上書きし、再検証した新しい設定を返す

    値が None の項目は上書きしない

    Args:
        config: 元の設定
        overrides: {セクション名: {項目名: 値}}

    Returns:
        EngineConfig: 上書き後の設定

    Raises:
        ConfigError: 上書き後の値が検証に通らない場合
    """
    data = config.model_dump()
    for section, values in overrides.items():
        data.setdefault(section, {}).update(
            {key: value for key, value in values.items() if value is not None}
        )

    try:
        return EngineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            "invalid config override",
            context={"overrides": overrides, "errors": e.error_count()},
        ) from e
