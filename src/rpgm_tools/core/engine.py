"""
游戏引擎

Engine = 静态 EngineSettings + 按资源类型组织的处理器集合。
新引擎通过组装得到，而不是继承。

四个操作均不修改输入：
- validate_project: 校验工程目录（部分缺失按文件报告，不抛异常）
- read_project: 读取全部必需文件（任一失败则整体失败）
- extract_translations: 提取翻译单元
- apply_translations: 回填译文，返回新的文件列表
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional, Protocol, Sequence

from ..utils.fs import FileResult, JsonFile, LocalFileSystem
from ..utils.logger import ProjectReadError
from .models import (
    EngineSettings,
    EngineValidation,
    GameResourceFile,
    TranslationUnit,
)

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    """引擎依赖的文件系统协作者"""

    def check_path_exists(self, path: str | Path) -> FileResult[bool]:
        ...

    def validate_required_files(self, root: str | Path, relative_paths: Iterable[str]) -> FileResult[list[str]]:
        ...

    def read_json_files(self, root: str | Path, relative_paths: Iterable[str]) -> FileResult[list[JsonFile]]:
        ...


class Handler(Protocol):
    """一种资源类型的提取与回填"""

    resource_type: str

    def extract(self, file: GameResourceFile) -> list[TranslationUnit]:
        ...

    def apply(self, file: GameResourceFile, translations: Iterable[TranslationUnit]) -> GameResourceFile:
        ...


class Engine:
    """一个游戏数据家族的校验/读取/提取/回填策略

    Args:
        settings: 静态元数据
        handlers: 各资源类型的处理器
        fs: 文件系统协作者，默认本地文件系统
        resource_type_of: file_type -> 资源类型（如 "map001" -> "maps"），默认原样返回
        discover_files: 根据已读取的必需文件列出额外要读取的文件（如地图文件）
    """

    def __init__(
        self,
        settings: EngineSettings,
        handlers: Iterable[Handler],
        fs: Optional[FileSystem] = None,
        resource_type_of: Optional[Callable[[str], str]] = None,
        discover_files: Optional[Callable[[Sequence[GameResourceFile]], list[str]]] = None,
    ):
        self.settings = settings
        self.handlers: Mapping[str, Handler] = {h.resource_type: h for h in handlers}
        self.fs: FileSystem = fs or LocalFileSystem()
        self._resource_type_of = resource_type_of
        self._discover_files = discover_files

    def resource_type_of(self, file: GameResourceFile) -> str:
        if self._resource_type_of is None:
            return file.file_type
        return self._resource_type_of(file.file_type)

    def __repr__(self) -> str:
        return f"Engine({self.settings.name!r} {self.settings.version})"

    @property
    def name(self) -> str:
        return self.settings.name

    @property
    def version(self) -> str:
        return self.settings.version

    def should_process_file(self, file: GameResourceFile) -> bool:
        if file.content is None:
            return False
        return self.resource_type_of(file) in self.settings.translatable_types

    def validate_project(self, project_root: str | Path) -> EngineValidation:
        """校验工程目录

        数据目录不存在时直接返回：所有必需文件都视为缺失，不再逐个检查。
        """
        required = list(self.settings.required_files)
        errors: list[str] = []

        anchor = Path(project_root) / self.settings.anchor_dir
        folder = self.fs.check_path_exists(anchor)
        if not folder.success:
            errors.append(f"Error checking data folder: {folder.error.message}")
            return EngineValidation(is_valid=False, missing_files=required, errors=errors)
        if not folder.data:
            errors.append("Data folder not found")
            logger.warning(f"{self.name}: data folder not found at {anchor}")
            return EngineValidation(is_valid=False, missing_files=required, errors=errors)

        missing: list[str] = []
        result = self.fs.validate_required_files(project_root, required)
        if not result.success:
            errors.append(f"Error validating files: {result.error.message}")
        elif result.data:
            missing.extend(result.data)
            errors.extend(f"Required file not found: {f}" for f in result.data)

        if errors:
            logger.warning(f"{self.name}: project invalid ({len(errors)} error(s))")
        else:
            logger.info(f"{self.name}: project valid at {project_root}")
        return EngineValidation(is_valid=not errors, missing_files=missing, errors=errors)

    def read_project(self, project_root: str | Path) -> list[GameResourceFile]:
        """读取全部必需文件，以及由它们发现的额外文件

        Raises:
            ProjectReadError: 任一文件无法读取或解析
        """
        required = list(self.settings.required_files)
        files = self._read_files(project_root, required)

        if self._discover_files is not None:
            extra = [p for p in self._discover_files(files) if p not in required]
            if extra:
                logger.debug(f"{self.name}: discovered {len(extra)} additional file(s)")
                files.extend(self._read_files(project_root, extra))

        logger.info(f"{self.name}: read {len(files)} file(s) from {project_root}")
        return files

    def _read_files(self, project_root: str | Path, relative_paths: list[str]) -> list[GameResourceFile]:
        result = self.fs.read_json_files(project_root, relative_paths)
        if not result.success or result.data is None:
            message = result.error.message if result.error else "Unknown error"
            raise ProjectReadError(
                f"Error reading project files: {message}",
                file_path=Path(project_root),
            )
        return [GameResourceFile.from_path(f.path, f.content) for f in result.data]

    def extract_translations(self, files: Sequence[GameResourceFile]) -> list[TranslationUnit]:
        """按文件顺序提取翻译单元；没有处理器的文件不产生单元"""
        units: list[TranslationUnit] = []
        for file in files:
            if not self.should_process_file(file):
                continue
            handler = self.handlers.get(self.resource_type_of(file))
            if handler is None:
                continue
            extracted = handler.extract(file)
            logger.debug(f"{file.path}: extracted {len(extracted)} unit(s)")
            units.extend(extracted)
        return units

    def apply_translations(
        self,
        files: Sequence[GameResourceFile],
        translations: Iterable[TranslationUnit],
    ) -> list[GameResourceFile]:
        """回填译文；结果与输入等长同序，无关文件原样返回"""
        by_file: dict[str, list[TranslationUnit]] = defaultdict(list)
        for unit in translations:
            by_file[unit.file].append(unit)

        return [self._apply_file(file, by_file.get(file.path, [])) for file in files]

    def _apply_file(self, file: GameResourceFile, translations: list[TranslationUnit]) -> GameResourceFile:
        if not translations or not self.should_process_file(file):
            return file
        handler = self.handlers.get(self.resource_type_of(file))
        if handler is None:
            return file
        return handler.apply(file, translations)
