# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  停用词配置 - 从配置文件加载停用词，支持内置默认值
  Stopwords Configuration - Loads task stopwords from a YAML file with built-in defaults.
"""

from pathlib import Path
from typing import Set

import yaml

from codemend.utils.logger import get_logger

logger = get_logger(__name__)

# Task-comparison stopwords. Only words longer than three characters matter,
# shorter ones are already dropped by the keyword extractor.
# 任务比较停用词（长度不超过3的词已被过滤）
_DEFAULT_STOPWORDS = frozenset({
    "this", "that", "with", "from", "have", "been", "were", "they",
    "what", "when", "where", "which", "while", "would", "could", "should",
})

_STOPWORDS_FILE = Path(__file__).parent.parent.parent / "stopwords.yaml"

_loaded: Set[str] = set()


def get_stopwords() -> Set[str]:
    """
    获取停用词集合，若可用则从文件加载

    Get stopwords set, loading from file if available.

    首次调用时从文件加载停用词（如果存在），后续调用使用缓存。
    如果文件加载失败，使用内置默认停用词。
    On first call, loads from file if it exists. Subsequent calls use cache.
    If file loading fails, uses built-in defaults.

    Returns:
        停用词集合 / Set of stopwords

    Example:
        >>> "which" in get_stopwords()
        True
    """
    global _loaded
    if _loaded:
        return _loaded

    if _STOPWORDS_FILE.exists():
        try:
            with open(_STOPWORDS_FILE, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
            if isinstance(data, dict):
                words = data.get("stopwords", [])
            elif isinstance(data, list):
                words = data
            else:
                words = []
            loaded = set(str(w).strip().lower() for w in words if str(w).strip())
            if loaded:
                _loaded = loaded
                logger.debug("Loaded %d stopwords from %s", len(_loaded), _STOPWORDS_FILE)
                return _loaded
        except Exception as exc:
            logger.warning("Failed to load stopwords file: %s, using defaults", exc)

    _loaded = set(_DEFAULT_STOPWORDS)
    return _loaded
