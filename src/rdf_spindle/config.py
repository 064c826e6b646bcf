"""
Configuration for rdf-spindle.

Provides:
- SpindleConfig: root URI, graph layout, title predicate, score baseline
  and the rulebase files to compile
- Loading from YAML or JSON files, with environment overrides
- Validation
- Logging setup for command-line use
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from rdf_spindle.errors import ConfigError
from rdf_spindle.vocab import RDFS_LABEL

logger = logging.getLogger(__name__)

# Environment variables
CONFIG_ENV = "SPINDLE_CONFIG"
RULEBASE_ENV = "SPINDLE_RULEBASE"

DEFAULT_ROOT = "http://localhost/"
DEFAULT_SCORE_BASELINE = 50

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class SpindleConfig:
    """
    Aggregation settings.

    'root_graph' defaults to 'root' when unset. An empty 'rulebase_paths'
    compiles to an empty (but valid) rulebase.
    """
    root: str = DEFAULT_ROOT
    multigraph: bool = False
    root_graph: Optional[str] = None
    title_predicate: str = RDFS_LABEL
    score_baseline: int = DEFAULT_SCORE_BASELINE
    rulebase_paths: List[str] = field(default_factory=list)
    log_level: str = "INFO"

    @property
    def root_graph_uri(self) -> str:
        return self.root_graph or self.root

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "multigraph": self.multigraph,
            "root_graph": self.root_graph,
            "title_predicate": self.title_predicate,
            "score_baseline": self.score_baseline,
            "rulebase_paths": list(self.rulebase_paths),
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpindleConfig":
        paths = data.get("rulebase_paths", data.get("rulebase", []))
        if isinstance(paths, str):
            paths = [paths]
        config = cls(
            root=data.get("root", DEFAULT_ROOT),
            multigraph=data.get("multigraph", False),
            root_graph=data.get("root_graph"),
            title_predicate=data.get("title_predicate", RDFS_LABEL),
            score_baseline=data.get("score_baseline", DEFAULT_SCORE_BASELINE),
            rulebase_paths=list(paths or []),
            log_level=str(data.get("log_level", "INFO")).upper(),
        )
        validate_or_raise(config)
        return config


def validate(config: SpindleConfig) -> List[str]:
    """
    Validate configuration.

    Returns list of error messages (empty if valid).
    """
    errors = []

    if not isinstance(config.root, str):
        errors.append("root must be a string")
    if not isinstance(config.multigraph, bool):
        errors.append("multigraph must be a boolean")
    if config.root_graph is not None and not isinstance(config.root_graph, str):
        errors.append("root_graph must be a string")
    if not isinstance(config.title_predicate, str) or not config.title_predicate:
        errors.append("title_predicate must be a non-empty string")
    if isinstance(config.score_baseline, bool) or not isinstance(config.score_baseline, int):
        errors.append("score_baseline must be an integer")
    if not all(isinstance(p, str) for p in config.rulebase_paths):
        errors.append("rulebase_paths must be a list of strings")
    if config.log_level not in LOG_LEVELS:
        errors.append(f"Invalid log_level: {config.log_level}")

    return errors


def validate_or_raise(config: SpindleConfig) -> None:
    """Validate configuration, raising on errors."""
    errors = validate(config)
    if errors:
        raise ConfigError("; ".join(errors))


def load_config(path: Optional[Union[str, Path]] = None) -> SpindleConfig:
    """
    Load configuration from a YAML or JSON file.

    With no path, the file named by SPINDLE_CONFIG is used; with neither,
    defaults apply. SPINDLE_RULEBASE (os.pathsep-separated) overrides the
    rulebase files in every case.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV) or None

    data: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot read configuration {path}: {e}") from e
        suffix = path.suffix.lower()
        try:
            if suffix in (".yaml", ".yml"):
                loaded = yaml.safe_load(text)
            elif suffix == ".json":
                loaded = json.loads(text)
            else:
                raise ConfigError(f"Unsupported configuration format: {path}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Invalid configuration {path}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration {path} must be a mapping")
        data = loaded
        logger.debug(f"Loaded configuration from {path}")

    rulebase = os.environ.get(RULEBASE_ENV)
    if rulebase:
        data = dict(data)
        data["rulebase_paths"] = [p for p in rulebase.split(os.pathsep) if p]

    return SpindleConfig.from_dict(data)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
