"""
文件系统工具函数

提供引擎所需的文件系统协作接口：
- 路径存在检查、必需文件校验、批量 JSON 读取（返回 FileResult，不抛异常）
- 原子写入（防止数据损坏）
- JSONL 读写支持
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# RPG Maker 自身保存数据库时使用的紧凑格式
RPGM_JSON_SEPARATORS = (",", ":")


@dataclass(frozen=True)
class FileSystemError:
    """文件系统操作错误"""

    code: str
    message: str


@dataclass(frozen=True)
class FileResult(Generic[T]):
    """文件操作结果：成功时携带 data，失败时携带 error"""

    data: Optional[T] = None
    error: Optional[FileSystemError] = None
    success: bool = True

    @classmethod
    def ok(cls, data: T) -> "FileResult[T]":
        return cls(data=data, success=True)

    @classmethod
    def fail(cls, code: str, message: str) -> "FileResult[T]":
        return cls(error=FileSystemError(code, message), success=False)


@dataclass(frozen=True)
class JsonFile:
    """已读取的 JSON 文件（path 为相对工程根目录的路径）"""

    path: str
    content: Any


def ensure_parent_dir(path: str | Path) -> Path:
    """确保父目录存在"""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


# ========================================
# 协作接口（返回 FileResult）
# ========================================

def check_path_exists(path: str | Path) -> FileResult[bool]:
    """检查文件或目录是否存在"""
    try:
        return FileResult.ok(Path(path).exists())
    except OSError as e:
        return FileResult.fail("CHECK_ERROR", f"Error checking path {path}: {e}")


def read_json_file(path: str | Path) -> FileResult[Any]:
    """读取并解析单个 JSON 文件

    使用 utf-8-sig 读取，兼容带 BOM 的数据文件。
    """
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
        return FileResult.ok(json.loads(text))
    except (OSError, UnicodeDecodeError, ValueError) as e:
        return FileResult.fail("READ_ERROR", f"Error reading file {path}: {e}")


def validate_required_files(
    root: str | Path,
    relative_paths: Iterable[str]
) -> FileResult[list[str]]:
    """逐个检查必需文件，返回缺失文件列表

    Args:
        root: 工程根目录
        relative_paths: 相对根目录的文件路径

    Returns:
        成功时 data 为缺失文件（保持输入顺序）
    """
    missing: list[str] = []
    for rel in relative_paths:
        result = check_path_exists(Path(root) / rel)
        if not result.success:
            return FileResult.fail(
                "VALIDATION_ERROR",
                f"Error validating files in {root}: {result.error.message}"
            )
        if not result.data:
            missing.append(rel)
    return FileResult.ok(missing)


def read_json_files(
    root: str | Path,
    relative_paths: Iterable[str]
) -> FileResult[list[JsonFile]]:
    """批量读取 JSON 文件

    任一文件读取或解析失败时整体失败，错误信息汇总所有失败文件。
    """
    results: list[JsonFile] = []
    errors: list[str] = []

    for rel in relative_paths:
        result = read_json_file(Path(root) / rel)
        if result.success:
            results.append(JsonFile(path=rel, content=result.data))
        else:
            errors.append(f"Failed to read {rel}: {result.error.message}")

    if errors:
        return FileResult.fail(
            "BATCH_READ_ERROR",
            f"Error reading files in {root}: " + "\n".join(errors)
        )
    return FileResult.ok(results)


class LocalFileSystem:
    """本地文件系统协作者（引擎默认使用）"""

    def check_path_exists(self, path: str | Path) -> FileResult[bool]:
        return check_path_exists(path)

    def validate_required_files(self, root: str | Path, relative_paths: Iterable[str]) -> FileResult[list[str]]:
        return validate_required_files(root, relative_paths)

    def read_json_files(self, root: str | Path, relative_paths: Iterable[str]) -> FileResult[list[JsonFile]]:
        return read_json_files(root, relative_paths)


# ========================================
# 写入
# ========================================

def write_text_file(
    path: str | Path,
    text: str,
    encoding: str = 'utf-8',
    atomic: bool = True
) -> None:
    """写入文本文件

    Args:
        path: 文件路径
        text: 文件内容
        encoding: 编码
        atomic: 是否使用原子写入（先写临时文件再重命名）
    """
    p = ensure_parent_dir(path)

    if not atomic:
        p.write_text(text, encoding=encoding)
        return

    fd, tmp_path = tempfile.mkstemp(dir=p.parent, prefix=f".{p.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, 'w', encoding=encoding) as f:
            f.write(text)
        os.replace(tmp_path, p)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def write_json_file(path: str | Path, content: Any, atomic: bool = True) -> None:
    """按 RPG Maker 的紧凑格式写回 JSON 数据文件"""
    text = json.dumps(content, ensure_ascii=False, separators=RPGM_JSON_SEPARATORS)
    write_text_file(path, text, atomic=atomic)


def read_jsonl_lines(
    path: str | Path,
    skip_invalid: bool = True,
    log_errors: bool = True
) -> list[Dict[str, Any]]:
    """读取 JSONL 文件

    Args:
        path: 文件路径
        skip_invalid: 是否跳过无效行
        log_errors: 是否记录解析错误
    """
    p = Path(path)
    out: list[Dict[str, Any]] = []
    error_count = 0

    with p.open('r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                out.append(json.loads(line))
            except ValueError as e:
                error_count += 1
                if log_errors:
                    logger.warning(f"JSONL parse error at {p.name}:{line_num}: {e}")
                if not skip_invalid:
                    raise

    if error_count > 0 and log_errors:
        logger.warning(f"Skipped {error_count} invalid lines in {p.name}")

    return out


def write_jsonl_lines(path: str | Path, rows: Iterable[Dict[str, Any]], atomic: bool = True) -> int:
    """写入 JSONL 文件，返回写入的行数"""
    lines = [json.dumps(obj, ensure_ascii=False) for obj in rows]
    write_text_file(path, "".join(line + "\n" for line in lines), atomic=atomic)
    return len(lines)
