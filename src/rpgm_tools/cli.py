#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
RPG Maker 翻译工具集 - 命令行入口

子命令：
- validate: 校验工程目录
- extract:  提取可翻译文本为 JSONL
- apply:    将 JSONL 中的译文回填到数据文件

用法:
    rpgm-tools validate /path/to/game
    rpgm-tools extract /path/to/game -o outputs/units.jsonl
    rpgm-tools apply /path/to/game outputs/translated.jsonl -o outputs/game
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from . import __version__
from .core import Engine, EngineRegistry, TranslationUnit, create_default_registry
from .utils.config import ConfigManager
from .utils.fs import read_jsonl_lines, write_json_file, write_jsonl_lines
from .utils.logger import get_logger, log_exceptions, setup_logger

console = Console()


def _resolve_engine(registry: EngineRegistry, engine_type: Optional[str], project: Path) -> Engine:
    if engine_type is None:
        engine_type = registry.detect(project) or "rpgmv"
        get_logger().debug(f"Detected engine type: {engine_type}")
    return registry.get_engine(engine_type)


@log_exceptions(reraise=False, default_return=1)
def cmd_validate(args, registry: EngineRegistry) -> int:
    engine = _resolve_engine(registry, args.engine, args.project)
    result = engine.validate_project(args.project)

    if result.is_valid:
        get_logger().info(f"{engine.name} project is valid")
        return 0

    get_logger().warning(f"{engine.name} project is invalid: {len(result.errors)} error(s)")

    table = Table(title=f"{engine.name} validation")
    table.add_column("Error", style="red")
    for error in result.errors:
        table.add_row(error)
    console.print(table)
    return 1


@log_exceptions(reraise=False, default_return=1)
def cmd_extract(args, registry: EngineRegistry) -> int:
    engine = _resolve_engine(registry, args.engine, args.project)
    with get_logger().timer("Extracting translations"):
        files = engine.read_project(args.project)
        units = engine.extract_translations(files)
    count = write_jsonl_lines(args.output, (u.to_dict() for u in units))

    table = Table(title="Extracted units")
    table.add_column("File")
    table.add_column("Units", justify="right")
    for file in files:
        table.add_row(file.path, str(sum(1 for u in units if u.file == file.path)))
    console.print(table)
    get_logger().info(f"Wrote {count} unit(s) to {args.output}")
    return 0


@log_exceptions(reraise=False, default_return=1)
def cmd_apply(args, registry: EngineRegistry) -> int:
    engine = _resolve_engine(registry, args.engine, args.project)
    files = engine.read_project(args.project)
    units = [TranslationUnit.from_dict(row) for row in read_jsonl_lines(args.translations)]
    updated = engine.apply_translations(files, units)

    out_root: Path = args.output or args.project
    logger = get_logger()
    written = 0
    with logger.progress(len(updated), "Writing", disable=args.quiet) as update:
        for before, after in zip(files, updated):
            if after is not before:
                write_json_file(out_root / after.path, after.content)
                written += 1
            update(1)

    logger.info(f"Applied {len(units)} unit(s), wrote {written} file(s) to {out_root}")
    return 0


def _log_level(args) -> int:
    if args.verbose:
        return logging.DEBUG
    return getattr(logging, str(args.log_level).upper(), logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rpgm-tools",
        description="RPG Maker 翻译工具集 - 命令行入口",
    )
    parser.add_argument("--version", action="version", version=f"rpgm-tools {__version__}")
    parser.add_argument("--engine", default=None, help="引擎类型（默认自动检测）")
    parser.add_argument("--config", type=Path, default=None, help="配置文件路径")
    parser.add_argument("--log-file", type=Path, default=None, help="日志文件路径")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("-q", "--quiet", action="store_true", help="不显示进度条")

    sub = parser.add_subparsers(dest="command")

    p_validate = sub.add_parser("validate", help="校验工程目录")
    p_validate.add_argument("project", type=Path)
    p_validate.set_defaults(func=cmd_validate)

    p_extract = sub.add_parser("extract", help="提取可翻译文本")
    p_extract.add_argument("project", type=Path)
    p_extract.add_argument("-o", "--output", type=Path, default=Path("outputs/units.jsonl"))
    p_extract.set_defaults(func=cmd_extract)

    p_apply = sub.add_parser("apply", help="回填译文")
    p_apply.add_argument("project", type=Path)
    p_apply.add_argument("translations", type=Path, help="包含 target 的 JSONL")
    p_apply.add_argument("-o", "--output", type=Path, default=None, help="输出目录（默认原地写回）")
    p_apply.set_defaults(func=cmd_apply)

    return parser


def main(argv: Optional[list[str]] = None, registry: Optional[EngineRegistry] = None) -> int:
    """主入口函数"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    config = ConfigManager(args.config).config
    args.log_level = config.log_level
    if args.engine is None and args.config is not None:
        args.engine = config.engine
    setup_logger(level=_log_level(args), log_file=args.log_file)

    return args.func(args, registry or create_default_registry())


if __name__ == "__main__":
    sys.exit(main())
