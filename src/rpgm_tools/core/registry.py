"""
引擎注册表

引擎类型 -> 构造函数；首次请求时构造，之后复用同一实例。
注册表是普通对象，由程序入口创建并传递给使用方，测试可各自创建独立实例。
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from ..utils.logger import UnsupportedEngineError
from .engine import Engine

logger = logging.getLogger(__name__)

EngineFactory = Callable[[], Engine]
Detector = Callable[[Path], bool]


class EngineRegistry:
    """按类型标识管理引擎实例"""

    def __init__(self):
        self._factories: dict[str, EngineFactory] = {}
        self._detectors: dict[str, Detector] = {}
        self._engines: dict[str, Engine] = {}
        self._lock = threading.Lock()

    def register(self, engine_type: str, factory: EngineFactory, detector: Optional[Detector] = None) -> None:
        """注册引擎类型；重复注册会丢弃已缓存的实例"""
        with self._lock:
            self._factories[engine_type] = factory
            if detector is not None:
                self._detectors[engine_type] = detector
            self._engines.pop(engine_type, None)

    def is_supported(self, engine_type: str) -> bool:
        return engine_type in self._factories

    def available_engines(self) -> list[str]:
        return sorted(self._factories)

    def get_engine(self, engine_type: str) -> Engine:
        """获取引擎实例

        Raises:
            UnsupportedEngineError: 类型未注册
        """
        with self._lock:
            engine = self._engines.get(engine_type)
            if engine is not None:
                return engine
            factory = self._factories.get(engine_type)
            if factory is None:
                raise UnsupportedEngineError(engine_type, available=sorted(self._factories))
            engine = factory()
            self._engines[engine_type] = engine
            logger.debug(f"Created engine {engine!r} for type '{engine_type}'")
            return engine

    def detect(self, project_root: str | Path) -> Optional[str]:
        """返回第一个识别该工程目录的引擎类型，未识别返回 None"""
        root = Path(project_root)
        for engine_type, detector in self._detectors.items():
            if detector(root):
                return engine_type
        return None


def create_default_registry() -> EngineRegistry:
    """创建包含内置引擎的注册表"""
    from ..engines import rpgmv

    registry = EngineRegistry()
    registry.register(rpgmv.ENGINE_TYPE, rpgmv.create_engine, detector=rpgmv.is_rpgmv_project)
    return registry
