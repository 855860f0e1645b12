"""内置游戏引擎"""

from .rpgmv import ENGINE_TYPE as RPGMV, RESOURCE_TYPES, DetectionResult, create_engine, detect_rpgmv_project

__all__ = ["RPGMV", "RESOURCE_TYPES", "DetectionResult", "create_engine", "detect_rpgmv_project"]
