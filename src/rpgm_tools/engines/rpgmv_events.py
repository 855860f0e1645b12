"""
RPG Maker MV 事件指令文本

CommonEvents.json、Troops.json 与 MapXXX.json 的事件都带有指令列表
（{code, parameters}），其中只有少数指令携带可显示的文本：

- 101 显示文字（头像/名字框）: parameters[4] 说话人
- 401 文字行: parameters[0]
- 102 显示选项: parameters[0] 为选项数组
- 105 滚动文字: parameters[0]

单元的 field 是指令在记录内的路径，例如 "list[3].parameters[0]"、
"pages[0].list[5].parameters[0][1]"，与记录位置一起唯一定位一段文本。
"""

from __future__ import annotations

from typing import Iterator, Optional

from ..core.handlers import FieldSpec, PathKey, RecordHandler

SPEAKER = FieldSpec("speaker", "Speaker Name", "name")
MESSAGE = FieldSpec("message", "Message", "dialogue")
CHOICE = FieldSpec("choice", "Choice", "menu")
SCROLL_TEXT = FieldSpec("scroll", "Scrolling Text", "dialogue")


def command_text_slots(command: object) -> Iterator[tuple[list[PathKey], FieldSpec]]:
    """一条指令中可写的文本位置（相对 parameters）"""
    if not isinstance(command, dict):
        return
    params = command.get("parameters")
    if not isinstance(params, list):
        return
    code = command.get("code")

    if code == 101:
        if len(params) > 4 and isinstance(params[4], str):
            yield [4], SPEAKER
    elif code in (401, 105):
        if params and isinstance(params[0], str):
            yield [0], MESSAGE if code == 401 else SCROLL_TEXT
    elif code == 102:
        if params and isinstance(params[0], list):
            for i, choice in enumerate(params[0]):
                if isinstance(choice, str):
                    yield [0, i], CHOICE


class EventHandler(RecordHandler):
    """事件记录：名称 + 一个或多个指令列表

    Args:
        resource_type: 资源类型
        name_spec: 记录名称字段，None 表示不提取名称
        paged: True 时指令列表在 pages[i].list，否则在 list
        records_key: 见 RecordHandler
    """

    def __init__(
        self,
        resource_type: str,
        name_spec: Optional[FieldSpec],
        paged: bool,
        records_key: Optional[str] = None,
    ):
        super().__init__(resource_type, records_key=records_key)
        self.name_spec = name_spec
        self.paged = paged

    def _command_lists(self, record: dict) -> Iterator[tuple[list[PathKey], list]]:
        if not self.paged:
            commands = record.get("list")
            if isinstance(commands, list):
                yield ["list"], commands
            return
        pages = record.get("pages")
        if not isinstance(pages, list):
            return
        for p, page in enumerate(pages):
            if isinstance(page, dict) and isinstance(page.get("list"), list):
                yield ["pages", p, "list"], page["list"]

    def _slots(self, record: dict) -> Iterator[tuple[list[PathKey], FieldSpec]]:
        if self.name_spec is not None and isinstance(record.get(self.name_spec.field), str):
            yield [self.name_spec.field], self.name_spec
        for prefix, commands in self._command_lists(record):
            for c, command in enumerate(commands):
                for sub, spec in command_text_slots(command):
                    yield [*prefix, c, "parameters", *sub], spec
