# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  依赖注入工厂 - FastAPI Depends() 工厂函数，统一管理引擎实例创建
  Dependency Injection - FastAPI Depends() factories for centralized engine instance management.

设计原则 / Design Principles:
  所有Router应通过 Depends() 获取引擎实例，而非模块级实例化。
  Routers obtain the engine through Depends() so tests can override it
  with ``app.dependency_overrides``.
"""

from functools import lru_cache

from codemend.context_engine import ContextPreparationEngine


@lru_cache(maxsize=1)
def get_context_engine() -> ContextPreparationEngine:
    """
    获取或创建ContextPreparationEngine的单例实例

    Get or create singleton ContextPreparationEngine instance.

    Returns:
        ContextPreparationEngine实例 / ContextPreparationEngine instance
    """
    return ContextPreparationEngine()
