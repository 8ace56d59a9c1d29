# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  过期缓存 - 基于TTL的内存键值缓存，读取时惰性淘汰
  Expiring cache - In-memory key/value store with time-based expiry and lazy eviction on read.
"""

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from .models import CacheEntry
from codemend.utils.logger import get_logger

logger = get_logger(__name__)


class ExpiringCache:
    """
    过期缓存

    Keys are project-scoped strings such as ``"<len>#<project>:graph:<fingerprint>"``
    so a project-prefix ``invalidate`` drops everything a project owns. Expired
    entries are evicted on read and swept on every write. Correctness never
    depends on a hit: a miss only costs recomputation.
    """

    DEFAULT_TTL_SECONDS = 300.0

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Optional[Callable[[], float]] = None):
        """
        初始化缓存

        Args:
            ttl_seconds: 条目存活时间 / Entry lifetime in seconds
            clock: 时钟函数，测试时可替换 / Monotonic clock, injectable for tests
        """
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock or time.monotonic
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at > self.ttl_seconds

    def lookup(self, key: str) -> Tuple[bool, Any]:
        """
        查询缓存并区分"未命中"与"缓存的 None"

        Returns:
            (hit, value) - ``hit`` is False for absent or expired keys
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return False, None
            return True, entry.value

    def get(self, key: str) -> Any:
        """获取缓存值，缺失或过期返回 None / Value for key, or None when absent or expired."""
        _, value = self.lookup(key)
        return value

    def set(self, key: str, value: Any) -> None:
        """写入条目，并顺带清除已过期条目 / Store a value and sweep out expired entries."""
        with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._entries.items() if self._expired(entry, now)]
            for k in expired:
                del self._entries[k]
            self._entries[key] = CacheEntry(key=key, value=value, inserted_at=now)

    def invalidate(self, prefix: str) -> int:
        """
        删除指定前缀下的所有条目

        Remove every entry whose key starts with ``prefix``.

        Returns:
            删除的条目数 / Number of entries removed
        """
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("Invalidated %d cache entries under %s", len(doomed), prefix)
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> Dict[str, Any]:
        """获取缓存统计 / Entry count and insertion time of the oldest entry."""
        with self._lock:
            if not self._entries:
                return {"entries": 0, "oldest_entry": None}
            oldest = min(entry.inserted_at for entry in self._entries.values())
            return {"entries": len(self._entries), "oldest_entry": oldest}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
