# -*- coding: utf-8 -*-
"""
码匠 CodeMend - 多文件项目的上下文准备引擎
CodeMend - Context Preparation Engine for Multi-File Projects

Copyright © 2025-2026 CodeMend Team
License: PolyForm Noncommercial License 1.0.0

模块说明 / Module Description:
  应用级异常层次 - 定义业务逻辑层异常的完整继承树
  Application-level Exception Hierarchy - Business logic exception definitions.
"""


class CodeMendError(Exception):
    """
    CodeMend 业务错误的基类

    Base exception for all CodeMend business errors.

    所有应用级异常都应继承此类，以便于统一错误处理。
    All application-level exceptions should inherit from this class for
    consistent error handling and propagation.
    """


class ContextEngineError(CodeMendError):
    """
    上下文引擎组件失败异常

    Raised inside an engine collaborator (classifier, scorer, chunker) when
    it cannot produce a result. The orchestrator converts it into a
    reduced-fidelity payload; it never reaches the caller of a turn.

    抛出时机：
    - 模板检测谓词未注册 / Unknown detector predicate
    - 评分输入无效 / Invalid scoring input
    """


class ValidationError(CodeMendError):
    """
    数据验证失败异常

    Raised when input validation fails beyond Pydantic checks.

    抛出时机：
    - 项目ID为空 / Empty project id
    - 选项取值越界 / Option out of range

    Note: Pydantic ValidationError 由框架自动处理，不需要手动抛出此异常。
    """
