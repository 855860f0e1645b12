"""
数据模型

- GameResourceFile: 一个已解析的游戏数据文件
- TranslationUnit: 一个可翻译字段（文件 + 记录 ID + 字段名 唯一定位）
- EngineSettings / EngineValidation: 引擎静态配置与工程校验结果
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Optional

# 提示词类别（决定翻译时使用的 prompt）
PROMPT_TYPES = frozenset({
    "general", "dialogue", "menu", "items", "skills", "name", "nsfw",
})


def get_file_type(path: str) -> str:
    """从路径得到资源类型：去掉目录与扩展名后转小写

    >>> get_file_type("www/data/Actors.json")
    'actors'
    """
    return PurePosixPath(path.replace("\\", "/")).stem.lower()


@dataclass(frozen=True)
class GameResourceFile:
    """已读取的游戏数据文件，身份为 path"""

    path: str
    file_type: str
    content: Any

    @classmethod
    def from_path(cls, path: str, content: Any) -> "GameResourceFile":
        return cls(path=path, file_type=get_file_type(path), content=content)


@dataclass(frozen=True)
class TokenUsage:
    prompt: int = 0
    completion: int = 0
    total: int = 0


@dataclass(frozen=True)
class TranslationMeta:
    """翻译过程元数据（processing_time 单位：秒）"""

    processing_time: float = 0.0
    quality_score: Optional[float] = None
    cost: Optional[float] = None


@dataclass
class TranslationUnit:
    """一个可翻译字段

    身份为 (file, resource_id, field)，同一次提取内唯一。
    source 创建后不再修改；target 初始为空，由翻译步骤填写。
    """

    resource_id: str
    field: str
    source: str
    target: str = ""
    context: str = ""
    file: str = ""
    tokens: Optional[TokenUsage] = None
    metadata: Optional[TranslationMeta] = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.file, self.resource_id, self.field)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "resourceId": self.resource_id,
            "field": self.field,
            "source": self.source,
            "target": self.target,
            "context": self.context,
            "file": self.file,
        }
        if self.tokens is not None:
            data["tokens"] = {
                "prompt": self.tokens.prompt,
                "completion": self.tokens.completion,
                "total": self.tokens.total,
            }
        if self.metadata is not None:
            data["metadata"] = {
                "processingTime": self.metadata.processing_time,
                "qualityScore": self.metadata.quality_score,
                "cost": self.metadata.cost,
            }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranslationUnit":
        tokens = data.get("tokens")
        meta = data.get("metadata")
        return cls(
            resource_id=str(data.get("resourceId", "")),
            field=str(data.get("field", "")),
            source=data.get("source", ""),
            target=data.get("target") or "",
            context=data.get("context", ""),
            file=data.get("file", ""),
            tokens=TokenUsage(
                prompt=tokens.get("prompt") or 0,
                completion=tokens.get("completion") or 0,
                total=tokens.get("total") or 0,
            ) if tokens else None,
            metadata=TranslationMeta(
                processing_time=meta.get("processingTime") or 0.0,
                quality_score=meta.get("qualityScore"),
                cost=meta.get("cost"),
            ) if meta else None,
        )


@dataclass(frozen=True)
class EngineSettings:
    """引擎静态元数据，构造后不可变

    Attributes:
        name: 引擎名称
        version: 引擎版本
        anchor_dir: 数据目录（相对工程根目录）
        required_files: 必需文件（相对工程根目录）
        translatable_types: 可处理的资源类型
    """

    name: str
    version: str
    anchor_dir: str
    required_files: tuple[str, ...]
    translatable_types: frozenset[str]


@dataclass
class EngineValidation:
    is_valid: bool
    missing_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
