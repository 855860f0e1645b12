"""
RPG Maker MV 引擎

数据库文件（www/data/*.json）大多为 [null, {id: 1, ...}, ...] 结构：
- 平铺字段的文件（Actors、Items、MapInfos 等）各对应一张静态字段表
- CommonEvents、Troops 与地图文件（MapXXX.json）的文本在事件指令里
- System.json 是单个对象

地图文件名不固定，由 MapInfos.json 中的地图 ID 得出。
"""

from __future__ import annotations

import enum
import re
from pathlib import Path
from typing import Optional, Sequence

from ..core.engine import Engine, FileSystem
from ..core.handlers import FieldSpec, ResourceHandler
from ..core.models import EngineSettings, GameResourceFile
from ..utils.logger import ConfigurationError
from .rpgmv_events import EventHandler
from .rpgmv_system import SystemHandler

ENGINE_TYPE = "rpgmv"

DATA_DIR = "www/data"

# 资源类型 -> 字段表（顺序即提取顺序）
SCHEMAS: dict[str, tuple[FieldSpec, ...]] = {
    "actors": (
        FieldSpec("name", "Actor Name", "name"),
        FieldSpec("nickname", "Actor Title", "name"),
        FieldSpec("profile", "Actor Profile", "dialogue"),
        FieldSpec("note", "Actor Notes", "general"),
    ),
    "classes": (
        FieldSpec("name", "Class Name", "name"),
        FieldSpec("note", "Class Notes", "general"),
    ),
    "skills": (
        FieldSpec("name", "Skill Name", "skills"),
        FieldSpec("description", "Skill Description", "skills"),
        FieldSpec("message1", "Skill Message 1", "dialogue"),
        FieldSpec("message2", "Skill Message 2", "dialogue"),
        FieldSpec("note", "Skill Notes", "general"),
    ),
    "items": (
        FieldSpec("name", "Item Name", "items"),
        FieldSpec("description", "Item Description", "items"),
        FieldSpec("note", "Item Notes", "general"),
    ),
    "weapons": (
        FieldSpec("name", "Weapon Name", "items"),
        FieldSpec("description", "Weapon Description", "items"),
        FieldSpec("note", "Weapon Notes", "general"),
    ),
    "armors": (
        FieldSpec("name", "Armor Name", "items"),
        FieldSpec("description", "Armor Description", "items"),
        FieldSpec("note", "Armor Notes", "general"),
    ),
    "enemies": (
        FieldSpec("name", "Enemy Name", "name"),
        FieldSpec("note", "Enemy Notes", "general"),
    ),
    "states": (
        FieldSpec("name", "State Name", "name"),
        FieldSpec("message1", "State Message (actor)", "dialogue"),
        FieldSpec("message2", "State Message (enemy)", "dialogue"),
        FieldSpec("message3", "State Message (persist)", "dialogue"),
        FieldSpec("message4", "State Message (removed)", "dialogue"),
        FieldSpec("note", "State Notes", "general"),
    ),
    "mapinfos": (
        FieldSpec("name", "Map Name", "name"),
    ),
}

# 事件类资源：名称字段、指令列表是否分页、记录数组所在的键
EVENT_TYPES = {
    "commonevents": (FieldSpec("name", "Common Event Name", "name"), False, None),
    "troops": (FieldSpec("name", "Troop Name", "name"), True, None),
    "maps": (FieldSpec("name", "Event Name", "name"), True, "events"),
}

RESOURCE_TYPES = (*SCHEMAS, "commonevents", "troops", "maps", "system")

# 资源类型 -> 文件名
FILE_NAMES = {
    "actors": "Actors.json",
    "classes": "Classes.json",
    "skills": "Skills.json",
    "items": "Items.json",
    "weapons": "Weapons.json",
    "armors": "Armors.json",
    "enemies": "Enemies.json",
    "states": "States.json",
    "mapinfos": "MapInfos.json",
    "commonevents": "CommonEvents.json",
    "troops": "Troops.json",
    "system": "System.json",
}

_MAP_FILE = re.compile(r"map\d+")


class DetectionResult(enum.Enum):
    BY_PROJECT_FILE = "project_file"  # 存在 Game.rpgproject
    BY_WWW_DATA = "www_data"          # 存在 www/data 目录
    NOT_DETECTED = "not_detected"


def detect_rpgmv_project(project_root: str | Path) -> DetectionResult:
    root = Path(project_root)
    if (root / "Game.rpgproject").is_file():
        return DetectionResult.BY_PROJECT_FILE
    if (root / DATA_DIR).is_dir():
        return DetectionResult.BY_WWW_DATA
    return DetectionResult.NOT_DETECTED


def is_rpgmv_project(project_root: Path) -> bool:
    return detect_rpgmv_project(project_root) is not DetectionResult.NOT_DETECTED


def _resource_types(resource_types: Optional[list[str]]) -> list[str]:
    types = list(resource_types or RESOURCE_TYPES)
    unknown = [t for t in types if t not in RESOURCE_TYPES]
    if unknown:
        raise ConfigurationError(
            f"Unknown RPG Maker MV resource type(s): {unknown}",
            config_key="resource_types",
        )
    return types


def resource_type_of(file_type: str) -> str:
    """Map001 等地图文件统一归为 "maps" """
    return "maps" if _MAP_FILE.fullmatch(file_type) else file_type


def map_file_path(map_id: int) -> str:
    return f"{DATA_DIR}/Map{map_id:03d}.json"


def discover_map_files(files: Sequence[GameResourceFile]) -> list[str]:
    """从 MapInfos.json 列出地图文件（按地图 ID 顺序）"""
    map_ids: set[int] = set()
    for file in files:
        if file.file_type != "mapinfos" or not isinstance(file.content, list):
            continue
        for info in file.content[1:]:
            if isinstance(info, dict):
                map_id = info.get("id")
                if isinstance(map_id, int) and not isinstance(map_id, bool) and map_id > 0:
                    map_ids.add(map_id)
    return [map_file_path(map_id) for map_id in sorted(map_ids)]


def _required_files(types: list[str]) -> tuple[str, ...]:
    names = [FILE_NAMES[t] for t in types if t in FILE_NAMES]
    # 地图文件由 MapInfos.json 发现
    if "maps" in types and FILE_NAMES["mapinfos"] not in names:
        names.append(FILE_NAMES["mapinfos"])
    return tuple(f"{DATA_DIR}/{name}" for name in names)


def build_handler(resource_type: str):
    """按资源类型创建处理器"""
    if resource_type in SCHEMAS:
        return ResourceHandler(resource_type, SCHEMAS[resource_type])
    if resource_type in EVENT_TYPES:
        name_spec, paged, records_key = EVENT_TYPES[resource_type]
        return EventHandler(resource_type, name_spec, paged, records_key=records_key)
    return SystemHandler(resource_type)


def build_settings(resource_types: Optional[list[str]] = None) -> EngineSettings:
    types = _resource_types(resource_types)
    return EngineSettings(
        name="RPG Maker MV",
        version="1.0.0",
        anchor_dir=DATA_DIR,
        required_files=_required_files(types),
        translatable_types=frozenset(types),
    )


def create_engine(fs: Optional[FileSystem] = None, resource_types: Optional[list[str]] = None) -> Engine:
    """组装 RPG Maker MV 引擎

    Args:
        fs: 文件系统协作者，默认本地文件系统
        resource_types: 只处理部分资源类型（默认全部）
    """
    types = _resource_types(resource_types)
    return Engine(
        build_settings(types),
        [build_handler(t) for t in types],
        fs=fs,
        resource_type_of=resource_type_of,
        discover_files=discover_map_files if "maps" in types else None,
    )
