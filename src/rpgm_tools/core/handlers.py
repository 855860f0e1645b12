"""
资源类型处理器

每种资源类型（如 actors）对应一张静态字段表：字段名 -> (上下文标签, 提示词类别)。
处理器只看字段表里声明的字段，不会遍历记录的任意键。

数据文件形如 [null, {id: 1, ...}, {id: 2, ...}]：
下标 0 是保留空位，真实记录从下标 1 开始，与外部 1 起始的 ID 对应。
resource_id 就是记录在数组中的位置，提取与回填使用同一套编号。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Union

from .models import PROMPT_TYPES, GameResourceFile, TranslationUnit

logger = logging.getLogger(__name__)

# 保留空位的下标
RESERVED_INDEX = 0

PathKey = Union[str, int]


@dataclass(frozen=True)
class FieldSpec:
    """字段表中的一项"""

    field: str
    context: str
    prompt_type: str = "general"

    def __post_init__(self):
        if self.prompt_type not in PROMPT_TYPES:
            raise ValueError(f"Unknown prompt type: {self.prompt_type}")

    @property
    def label(self) -> str:
        return f"{self.context} ({self.prompt_type})"


# ========================================
# 字段路径："pages[0].list[3].parameters[0]"
# ========================================

_PATH_TOKEN = re.compile(r"\.?([A-Za-z_]\w*)|\[(\d+)\]")


def format_field_path(keys: Sequence[PathKey]) -> str:
    parts = []
    for key in keys:
        if isinstance(key, int):
            parts.append(f"[{key}]")
        else:
            parts.append(f".{key}" if parts else key)
    return "".join(parts)


def parse_field_path(text: str) -> Optional[list[PathKey]]:
    """解析字段路径，格式不合法返回 None"""
    if not text or text.startswith("."):
        return None
    keys: list[PathKey] = []
    pos = 0
    while pos < len(text):
        match = _PATH_TOKEN.match(text, pos)
        if match is None:
            return None
        name, index = match.groups()
        keys.append(name if name is not None else int(index))
        pos = match.end()
    return keys


def lookup_path(node: Any, keys: Sequence[PathKey]) -> Any:
    """沿路径取值

    Raises:
        KeyError: 路径不存在
    """
    for key in keys:
        if isinstance(key, int) and isinstance(node, list) and 0 <= key < len(node):
            node = node[key]
        elif isinstance(key, str) and isinstance(node, dict) and key in node:
            node = node[key]
        else:
            raise KeyError(key)
    return node


def assign_path(node: Any, keys: Sequence[PathKey], value: Any) -> Any:
    """返回路径上各层都已复制、末端替换为 value 的新对象；路径外的部分共享"""
    if not keys:
        return value
    key, rest = keys[0], keys[1:]
    copied = list(node) if isinstance(node, list) else dict(node)
    copied[key] = assign_path(node[key], rest, value)
    return copied


# ========================================
# 处理器
# ========================================

class RecordHandler:
    """1 起始记录数组的公共逻辑

    子类实现 _slots：列出一条记录里所有可写的文本位置。

    Args:
        resource_type: 资源类型
        records_key: 记录数组所在的键（如地图文件的 "events"），None 表示文件内容本身就是数组
    """

    def __init__(self, resource_type: str, records_key: Optional[str] = None):
        self.resource_type = resource_type
        self.records_key = records_key

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.resource_type!r})"

    def _slots(self, record: dict) -> Iterator[tuple[list[PathKey], FieldSpec]]:
        raise NotImplementedError

    def _record_list(self, content: Any) -> Optional[list]:
        if self.records_key is not None:
            content = content.get(self.records_key) if isinstance(content, dict) else None
        return content if isinstance(content, list) else None

    def _records(self, records: list) -> Iterator[tuple[int, dict]]:
        """遍历真实记录（跳过保留空位与空记录）"""
        for index in range(RESERVED_INDEX + 1, len(records)):
            record = records[index]
            if isinstance(record, dict):
                if record.get("id", index) != index:
                    logger.debug(f"{self.resource_type}: record at [{index}] has id {record.get('id')!r}")
                yield index, record

    def _resolve_index(self, records: list, resource_id: str) -> Optional[int]:
        try:
            index = int(resource_id)
        except (TypeError, ValueError):
            return None
        if index <= RESERVED_INDEX or index >= len(records):
            return None
        if not isinstance(records[index], dict):
            return None
        return index

    def _target_path(self, record: dict, field: str) -> Optional[list[PathKey]]:
        """field 对应的可写位置；不可写返回 None"""
        keys = parse_field_path(field)
        if keys is None:
            return None
        for slot, _ in self._slots(record):
            if slot == keys:
                return keys
        return None

    def extract(self, file: GameResourceFile) -> list[TranslationUnit]:
        """提取文件中的可翻译文本

        顺序：记录顺序，记录内按 _slots 的顺序。空字符串不提取。
        """
        records = self._record_list(file.content)
        if records is None:
            return []
        units: list[TranslationUnit] = []
        for index, record in self._records(records):
            for keys, spec in self._slots(record):
                value = lookup_path(record, keys)
                if value != "":
                    units.append(TranslationUnit(
                        resource_id=str(index),
                        field=format_field_path(keys),
                        source=value,
                        context=spec.label,
                        file=file.path,
                    ))
        return units

    def apply(self, file: GameResourceFile, translations: Iterable[TranslationUnit]) -> GameResourceFile:
        """把译文写回，返回新的文件对象（不修改输入）

        resource_id 按整数解析。以下单元会被静默丢弃：
        ID 无法解析或不指向真实记录、字段不可写、target 为空。
        同一 (resource_id, field) 出现多次时，按输入顺序后者覆盖前者。
        """
        records = self._record_list(file.content)
        if records is None:
            return file

        updated = list(records)
        dropped = 0

        for unit in translations:
            index = self._resolve_index(updated, unit.resource_id)
            keys = self._target_path(updated[index], unit.field) if index is not None else None
            if keys is None or not unit.target:
                dropped += 1
                continue
            updated[index] = assign_path(updated[index], keys, unit.target)

        if dropped:
            logger.debug(f"{file.path}: dropped {dropped} unusable translation(s)")
        if self.records_key is None:
            return replace(file, content=updated)
        return replace(file, content={**file.content, self.records_key: updated})


class ResourceHandler(RecordHandler):
    """记录上的平铺字段（actors、items 等数据库文件）"""

    def __init__(self, resource_type: str, schema: Sequence[FieldSpec]):
        super().__init__(resource_type)
        self.schema: tuple[FieldSpec, ...] = tuple(schema)
        self.fields: Mapping[str, FieldSpec] = {spec.field: spec for spec in self.schema}
        if len(self.fields) != len(self.schema):
            raise ValueError(f"Duplicate field in {resource_type} schema")

    def __repr__(self) -> str:
        return f"ResourceHandler({self.resource_type!r}, fields={list(self.fields)})"

    def _slots(self, record: dict) -> Iterator[tuple[list[PathKey], FieldSpec]]:
        for spec in self.schema:
            if isinstance(record.get(spec.field), str):
                yield [spec.field], spec

    def _target_path(self, record: dict, field: str) -> Optional[list[PathKey]]:
        # 字段表中的字段总是可写，即使记录里暂时没有该键
        return [field] if field in self.fields else None
