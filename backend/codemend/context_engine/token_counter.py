# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  Token 计数 - tiktoken cl100k_base 编码（启动时加载），未加载时按字符估算
  Token counting - tiktoken cl100k_base encoding loaded once at startup, with a character estimate until it is available.
  Counting never loads the encoding itself; the first load may fetch the BPE file.
"""

import math
import threading
from functools import lru_cache
from typing import Any, Optional

import tiktoken

from codemend.utils.logger import get_logger

logger = get_logger(__name__)

ENCODING_NAME = "cl100k_base"
CHARS_PER_TOKEN = 4

_encoding: Optional[Any] = None
_encoding_loaded = False
_encoding_lock = threading.Lock()


def load_encoding() -> bool:
    """
    加载 tiktoken 编码（应用启动时调用）

    Load the cl100k_base encoding. Called from application startup, never
    from a turn. Clears memoized counts so later calls use real token counts.

    Returns:
        编码是否可用 / Whether the encoding is available
    """
    global _encoding, _encoding_loaded
    with _encoding_lock:
        if not _encoding_loaded:
            try:
                _encoding = tiktoken.get_encoding(ENCODING_NAME)
            except Exception as exc:
                logger.warning("tiktoken encoding %s unavailable, estimating tokens: %s", ENCODING_NAME, exc)
                _encoding = None
            _encoding_loaded = True
            count_tokens.cache_clear()
    return _encoding is not None


def estimate_tokens(text: str) -> int:
    """按字符估算 / Character-based estimate, ceil(len / 4)."""
    return math.ceil(len(text or "") / CHARS_PER_TOKEN)


@lru_cache(maxsize=256)
def count_tokens(text: str) -> int:
    """
    计算文本 Token 数量

    Count tokens with cl100k_base once loaded, otherwise estimate.

    Args:
        text: 文本 / Text to count

    Returns:
        Token 数 / Token count, 0 for empty text
    """
    if not text:
        return 0
    encoding = _encoding
    if encoding is None:
        return estimate_tokens(text)
    return len(encoding.encode(text, disallowed_special=()))
