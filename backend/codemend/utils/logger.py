# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  集中式日志系统 - 提供统一的日志配置和管理
  Centralized Logging Module - Unified logging configuration and management

使用示例 / Usage:
    from codemend.utils.logger import get_logger

    logger = get_logger(__name__)
    logger.info("引擎启动 / Engine started")
    logger.debug("缓存命中 / Cache hit: %s", key)
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional

from codemend.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _resolve_log_dir() -> Optional[Path]:
    """File logging is opt-in through settings.log_dir."""
    if not settings.log_dir:
        return None
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def get_logger(name: str) -> logging.Logger:
    """
    获取或创建指定名称的logger

    Get or create a logger with the specified name.

    控制台处理器总是启用；设置 log_dir 时额外添加轮转文件处理器（最大10MB，保留5个备份）。
    Console handler is always attached. When ``settings.log_dir`` is set a
    rotating file handler (10MB, 5 backups) is attached as well.

    Args:
        name: Logger名称，通常为 __name__ / Logger name (typically __name__)

    Returns:
        配置好的logger实例 / Configured logger instance
    """
    logger = logging.getLogger(name)

    # 避免多次添加处理器 / Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    level = logging.DEBUG if settings.debug else logging.INFO
    logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(console_handler)

    log_dir = _resolve_log_dir()
    if log_dir is not None:
        file_handler = RotatingFileHandler(
            log_dir / "codemend.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger
