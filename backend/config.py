"""
Logimaster configuration.

Defaults live on the dataclass; a YAML file (``config/logimaster.yaml`` or the
path in ``LOGIMASTER_CONFIG``) overrides any subset of them.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LOGIMASTER_CONFIG"
DEFAULT_CONFIG_PATH = "config/logimaster.yaml"


@dataclass(slots=True)
class GeneratorConfig:
    """Bounds for the practice-problem generators."""

    syntax_min_terms: int = 3
    syntax_max_terms: int = 4
    syntax_attempts: int = 10
    evaluation_max_depth: int = 4
    evaluation_min_length: int = 15
    table_variables: Tuple[str, ...] = ("P", "Q", "R")
    table_max_depth: int = 3
    table_min_length: int = 5
    max_attempts: int = 50


@dataclass(slots=True)
class LogimasterConfig:
    seed: Optional[int] = None
    max_parse_depth: int = 200
    log_level: str = "INFO"
    history_log: Optional[Path] = None
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogimasterConfig":
        gen = data.get("generator", {}) or {}
        defaults = GeneratorConfig()
        seed = data.get("seed")
        history = data.get("history_log")
        return cls(
            seed=int(seed) if seed is not None else None,
            max_parse_depth=int(data.get("max_parse_depth", 200)),
            log_level=str(data.get("log_level", "INFO")).upper(),
            history_log=Path(history) if history else None,
            generator=GeneratorConfig(
                syntax_min_terms=int(gen.get("syntax_min_terms", defaults.syntax_min_terms)),
                syntax_max_terms=int(gen.get("syntax_max_terms", defaults.syntax_max_terms)),
                syntax_attempts=int(gen.get("syntax_attempts", defaults.syntax_attempts)),
                evaluation_max_depth=int(gen.get("evaluation_max_depth", defaults.evaluation_max_depth)),
                evaluation_min_length=int(gen.get("evaluation_min_length", defaults.evaluation_min_length)),
                table_variables=tuple(str(v).upper() for v in gen.get("table_variables", defaults.table_variables)),
                table_max_depth=int(gen.get("table_max_depth", defaults.table_max_depth)),
                table_min_length=int(gen.get("table_min_length", defaults.table_min_length)),
                max_attempts=int(gen.get("max_attempts", defaults.max_attempts)),
            ),
        )

    @classmethod
    def from_file(cls, path: Path | str) -> "LogimasterConfig":
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config {path} must be a YAML mapping, got {type(data).__name__}")
        return cls.from_dict(data)


def load_config_from_env() -> LogimasterConfig:
    """Load the YAML config named by the environment, or the defaults."""
    path = Path(os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))
    if not path.exists():
        logger.debug(f"No config at {path}, using defaults")
        return LogimasterConfig()
    logger.debug(f"Loading config from {path}")
    return LogimasterConfig.from_file(path)
