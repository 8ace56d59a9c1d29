# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  应用配置 - 环境变量设置与 config.yaml 引擎参数
  Application configuration - Environment-driven settings plus engine tunables from config.yaml.

使用示例 / Usage:
    from codemend.config import settings, config

    settings.debug
    config["context_engine"]["similarity_threshold"]
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

_BACKEND_ROOT = Path(__file__).resolve().parent.parent

# Built-in defaults. config.yaml is merged on top of these.
# 内置默认值，config.yaml 会覆盖这些值
DEFAULT_CONFIG: Dict[str, Any] = {
    "context_engine": {
        "cache_ttl_seconds": 300,
        "similarity_threshold": 0.7,
        "task_history_limit": 5,
        "continuity_preview_limit": 10,
        "graph_depth": 2,
        "top_k": 10,
        "chunk_threshold": 500,
        "chunk_min_lines": 50,
    },
    "relevance_weights": {
        "path_token": 50,
        "content_token": 5,
        "content_token_cap": 50,
        "context_keyword": 20,
        "intent_role": 30,
        "bootstrap_file": 20,
        "size_penalty": 10,
        "min_content_chars": 100,
        "max_content_chars": 50000,
    },
}


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """
    运行时设置 / Runtime settings.

    Populated from ``CODEMEND_*`` environment variables.
    """

    debug: bool = Field(default=False, description="Verbose logging and uvicorn reload")
    host: str = Field(default="127.0.0.1", description="Bind host")
    port: int = Field(default=8000, description="Bind port")
    log_dir: Optional[str] = Field(default=None, description="Rotating log directory; console only when unset")
    config_path: str = Field(default=str(_BACKEND_ROOT / "config.yaml"), description="Engine config file")

    @classmethod
    def from_env(cls) -> "Settings":
        values: Dict[str, Any] = {"debug": _env_flag("CODEMEND_DEBUG")}
        if os.getenv("CODEMEND_HOST"):
            values["host"] = os.environ["CODEMEND_HOST"]
        if os.getenv("CODEMEND_PORT"):
            values["port"] = int(os.environ["CODEMEND_PORT"])
        if os.getenv("CODEMEND_LOG_DIR"):
            values["log_dir"] = os.environ["CODEMEND_LOG_DIR"]
        if os.getenv("CODEMEND_CONFIG"):
            values["config_path"] = os.environ["CODEMEND_CONFIG"]
        return cls(**values)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    加载 YAML 配置并与默认值合并

    Load the YAML config file and merge it over the built-in defaults.
    A missing or malformed file yields the defaults.

    Args:
        path: 配置文件路径 / Config file path (defaults to settings.config_path)

    Returns:
        合并后的配置字典 / Merged configuration dict
    """
    config_file = Path(path or settings.config_path)
    if not config_file.exists():
        return copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return copy.deepcopy(DEFAULT_CONFIG)
    if not isinstance(data, dict):
        return copy.deepcopy(DEFAULT_CONFIG)
    return _deep_merge(DEFAULT_CONFIG, data)


settings = Settings.from_env()
config = load_config()
