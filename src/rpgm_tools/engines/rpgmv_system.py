"""
RPG Maker MV System.json

System.json 是单个对象而不是记录数组。所有单元使用 resource_id "0"，
field 为对象内路径，例如 "gameTitle"、"elements[3]"、"terms.messages.victory"。

terms.messages 中的 %1、%2 等占位符在运行时替换，译文必须原样保留。
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Iterator

from ..core.handlers import (
    FieldSpec,
    PathKey,
    assign_path,
    format_field_path,
    lookup_path,
    parse_field_path,
)
from ..core.models import GameResourceFile, TranslationUnit

logger = logging.getLogger(__name__)

SYSTEM_RESOURCE_ID = "0"

# 单个字符串
STRINGS = (
    FieldSpec("gameTitle", "Game Title", "name"),
    FieldSpec("currencyUnit", "Currency Unit", "menu"),
)

# 字符串数组（路径 -> 每一项的字段表项）
STRING_LISTS = (
    FieldSpec("armorTypes", "Armor Type", "menu"),
    FieldSpec("skillTypes", "Skill Type", "menu"),
    FieldSpec("weaponTypes", "Weapon Type", "menu"),
    FieldSpec("elements", "Element", "menu"),
    FieldSpec("equipTypes", "Equip Type", "menu"),
    FieldSpec("switches", "Switch Name", "general"),
    FieldSpec("variables", "Variable Name", "general"),
    FieldSpec("terms.basic", "Basic Term", "menu"),
    FieldSpec("terms.commands", "Command Term", "menu"),
    FieldSpec("terms.params", "Parameter Term", "menu"),
)

MESSAGE_KEYS = (
    "actionFailure", "actorDamage", "actorDrain", "actorGain", "actorLoss",
    "actorNoDamage", "actorNoHit", "actorRecovery", "alwaysDash", "bgmVolume",
    "bgsVolume", "buffAdd", "buffRemove", "commandRemember", "counterAttack",
    "criticalToActor", "criticalToEnemy", "debuffAdd", "defeat", "emerge",
    "enemyDamage", "enemyDrain", "enemyGain", "enemyLoss", "enemyNoDamage",
    "enemyNoHit", "enemyRecovery", "escapeFailure", "escapeStart", "evasion",
    "expNext", "expTotal", "file", "levelUp", "loadMessage",
    "magicEvasion", "magicReflection", "meVolume", "obtainExp", "obtainGold",
    "obtainItem", "obtainSkill", "partyName", "possession", "preemptive",
    "saveMessage", "seVolume", "substitute", "surprise", "useItem",
    "victory",
)

MESSAGES = tuple(
    FieldSpec(f"terms.messages.{key}", "System Message", "dialogue") for key in MESSAGE_KEYS
)


class SystemHandler:
    """System.json 中的游戏标题、类型名与用语"""

    def __init__(self, resource_type: str = "system"):
        self.resource_type = resource_type

    def __repr__(self) -> str:
        return f"SystemHandler({self.resource_type!r})"

    def _slots(self, content: dict) -> Iterator[tuple[list[PathKey], FieldSpec]]:
        for spec in (*STRINGS, *MESSAGES):
            keys = parse_field_path(spec.field)
            if isinstance(_get(content, keys), str):
                yield keys, spec
        for spec in STRING_LISTS:
            keys = parse_field_path(spec.field)
            values = _get(content, keys)
            if isinstance(values, list):
                for i, value in enumerate(values):
                    if isinstance(value, str):
                        yield [*keys, i], spec

    def extract(self, file: GameResourceFile) -> list[TranslationUnit]:
        content = file.content
        if not isinstance(content, dict):
            return []
        units: list[TranslationUnit] = []
        for keys, spec in self._slots(content):
            value = lookup_path(content, keys)
            if value != "":
                units.append(TranslationUnit(
                    resource_id=SYSTEM_RESOURCE_ID,
                    field=format_field_path(keys),
                    source=value,
                    context=spec.label,
                    file=file.path,
                ))
        return units

    def apply(self, file: GameResourceFile, translations: Iterable[TranslationUnit]) -> GameResourceFile:
        """回填译文；resource_id 不为 0、路径不可写或 target 为空的单元被丢弃"""
        content = file.content
        if not isinstance(content, dict):
            return file

        writable = {format_field_path(keys) for keys, _ in self._slots(content)}
        updated: Any = content
        dropped = 0

        for unit in translations:
            if not unit.target or not _is_system_id(unit.resource_id) or unit.field not in writable:
                dropped += 1
                continue
            updated = assign_path(updated, parse_field_path(unit.field), unit.target)

        if dropped:
            logger.debug(f"{file.path}: dropped {dropped} unusable translation(s)")
        return replace(file, content=updated)


def _get(content: dict, keys: list[PathKey]) -> Any:
    try:
        return lookup_path(content, keys)
    except KeyError:
        return None


def _is_system_id(resource_id: str) -> bool:
    try:
        return int(resource_id) == 0
    except (TypeError, ValueError):
        return False
