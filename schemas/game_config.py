"""
Pydantic schemas for engine configuration.

Configuration can be provided via a YAML/JSON file and overridden with
DEADBLOCK_* environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field

from agents.heuristic_agent import AIDifficulty
from schemas.puzzle import PuzzleDifficulty

logger = logging.getLogger(__name__)

ENV_PREFIX = "DEADBLOCK_"


class EngineConfig(BaseModel):
    """Tunables shared by the AI, the puzzle generator and the web API."""
    ai_difficulty: AIDifficulty = AIDifficulty.INTERMEDIATE
    puzzle_difficulty: PuzzleDifficulty = PuzzleDifficulty.EASY
    puzzle_max_attempts: int = Field(default=10, ge=1, le=1000)
    oracle_url: Optional[str] = Field(default=None, description="Move-suggestion endpoint; None disables it")
    oracle_timeout_seconds: float = Field(default=5.0, gt=0.0, le=120.0)
    oracle_sample_size: int = Field(default=30, ge=1, le=500,
                                    description="Legal moves shown to the oracle per request")
    seed: Optional[int] = None
    log_level: str = "INFO"

    model_config = {
        "json_schema_extra": {
            "example": {
                "ai_difficulty": "expert",
                "puzzle_difficulty": "medium",
                "puzzle_max_attempts": 10,
                "oracle_url": None,
                "oracle_timeout_seconds": 5.0,
                "oracle_sample_size": 30,
                "seed": 42,
                "log_level": "INFO",
            }
        }
    }


def _read_config_file(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides() -> Dict[str, Any]:
    overrides = {}
    for name in EngineConfig.model_fields:
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            overrides[name] = raw
    return overrides


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Load configuration from an optional file plus environment overrides.

    Args:
        path: YAML (.yaml/.yml) or JSON (.json) file; None uses defaults

    Returns:
        Validated EngineConfig
    """
    data: Dict[str, Any] = {}
    if path is not None:
        data.update(_read_config_file(Path(path)))
        logger.info(f"Loaded config from {path}")
    data.update(_env_overrides())
    return EngineConfig(**data)
