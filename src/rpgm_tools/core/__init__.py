"""
核心模块

提供引擎抽象（校验/读取/提取/回填）、带退避的调度与统计聚合
"""

from .models import (
    GameResourceFile, TranslationUnit, TokenUsage, TranslationMeta,
    EngineSettings, EngineValidation, PROMPT_TYPES, get_file_type,
)
from .handlers import FieldSpec, RecordHandler, ResourceHandler
from .engine import Engine, Handler
from .registry import EngineRegistry, create_default_registry
from .dispatcher import (
    RetryConfig, with_retry, BatchOptions, BatchResult, BatchError,
    TranslationProvider, dispatch_batch, dispatch_in_batches,
)
from .stats import TranslationStats, create_stats, update_stats, merge_stats, format_stats

__all__ = [
    'GameResourceFile',
    'TranslationUnit',
    'TokenUsage',
    'TranslationMeta',
    'EngineSettings',
    'EngineValidation',
    'PROMPT_TYPES',
    'get_file_type',
    'FieldSpec',
    'RecordHandler',
    'ResourceHandler',
    'Engine',
    'Handler',
    'EngineRegistry',
    'create_default_registry',
    'RetryConfig',
    'with_retry',
    'BatchOptions',
    'BatchResult',
    'BatchError',
    'TranslationProvider',
    'dispatch_batch',
    'dispatch_in_batches',
    'TranslationStats',
    'create_stats',
    'update_stats',
    'merge_stats',
    'format_stats',
]
