"""
RPG Maker MV 数据文件测试

覆盖 MapInfos、事件指令（公共事件 / 敌群 / 地图）、System.json 与地图文件发现
"""

import copy
import json

import pytest

from rpgm_tools.core import GameResourceFile, TranslationUnit
from rpgm_tools.engines.rpgmv import (
    create_engine, discover_map_files, resource_type_of, build_handler,
)


def command(code, *parameters, indent=0):
    return {"code": code, "indent": indent, "parameters": list(parameters)}


def message_list():
    """一段典型的对话：头像 + 两行文字 + 选项 + 结束"""
    return [
        command(101, "Actor1", 0, 0, 2, "Harold"),
        command(401, "Welcome to the village."),
        command(401, ""),
        command(102, ["Yes", "No", ""], 1, 0, 2, 0),
        command(105, 2, False),
        command(355, "this.gainGold(10)"),
        command(0),
    ]


@pytest.fixture
def common_events():
    return [
        None,
        {"id": 1, "name": "Greeting", "switchId": 1, "trigger": 0, "list": message_list()},
    ]


@pytest.fixture
def troops():
    return [
        None,
        {"id": 1, "name": "Slime*2", "members": [],
         "pages": [
             {"conditions": {}, "span": 0, "list": [command(401, "The slimes wobble."), command(0)]},
             {"conditions": {}, "span": 0, "list": [command(401, "They flee!"), command(0)]},
         ]},
    ]


@pytest.fixture
def map_data():
    return {
        "displayName": "Village",
        "width": 17,
        "height": 13,
        "data": [0] * 4,
        "events": [
            None,
            {"id": 1, "name": "Elder", "x": 3, "y": 4,
             "pages": [{"list": [command(401, "Hello, traveler."), command(0)]}]},
            None,
        ],
    }


@pytest.fixture
def system_data():
    return {
        "gameTitle": "Quest",
        "currencyUnit": "G",
        "elements": ["", "Physical", "Fire"],
        "switches": ["", "Door Open"],
        "windowTone": [0, 0, 0, 0],
        "terms": {
            "basic": ["Level", "Lv", ""],
            "commands": ["Fight", None],
            "params": ["Max HP"],
            "messages": {"victory": "%1 was victorious!", "defeat": "", "unknownKey": "ignored"},
        },
    }


def data_file(name, content):
    return GameResourceFile.from_path(f"www/data/{name}", content)


class TestMapInfos:
    """测试 MapInfos.json"""

    def test_map_names(self):
        content = [None, {"id": 1, "name": "Village", "parentId": 0, "order": 1},
                   {"id": 2, "name": "", "parentId": 1, "order": 2}]
        handler = build_handler("mapinfos")
        units = handler.extract(data_file("MapInfos.json", content))
        assert [(u.resource_id, u.field, u.source, u.context) for u in units] == [
            ("1", "name", "Village", "Map Name (name)"),
        ]


class TestEventCommands:
    """测试事件指令文本"""

    def test_common_event_extraction(self, common_events):
        units = build_handler("commonevents").extract(data_file("CommonEvents.json", common_events))

        assert [(u.resource_id, u.field, u.source) for u in units] == [
            ("1", "name", "Greeting"),
            ("1", "list[0].parameters[4]", "Harold"),
            ("1", "list[1].parameters[0]", "Welcome to the village."),
            ("1", "list[3].parameters[0][0]", "Yes"),
            ("1", "list[3].parameters[0][1]", "No"),
        ]
        assert units[1].context == "Speaker Name (name)"
        assert units[3].context == "Choice (menu)"

    def test_troop_pages(self, troops):
        units = build_handler("troops").extract(data_file("Troops.json", troops))
        assert [u.field for u in units] == [
            "name", "pages[0].list[0].parameters[0]", "pages[1].list[0].parameters[0]",
        ]

    def test_map_events(self, map_data):
        units = build_handler("maps").extract(data_file("Map001.json", map_data))
        assert [(u.resource_id, u.field, u.source) for u in units] == [
            ("1", "name", "Elder"),
            ("1", "pages[0].list[0].parameters[0]", "Hello, traveler."),
        ]

    def test_keys_unique(self, common_events):
        units = build_handler("commonevents").extract(data_file("CommonEvents.json", common_events))
        keys = [u.key for u in units]
        assert len(keys) == len(set(keys))

    def test_apply_message_and_choice(self, common_events):
        snapshot = copy.deepcopy(common_events)
        file = data_file("CommonEvents.json", common_events)

        result = build_handler("commonevents").apply(file, [
            TranslationUnit("1", "list[1].parameters[0]", "Welcome to the village.", target="村へようこそ。"),
            TranslationUnit("1", "list[3].parameters[0][1]", "No", target="いいえ"),
        ])

        commands = result.content[1]["list"]
        assert commands[1]["parameters"] == ["村へようこそ。"]
        assert commands[3]["parameters"][0] == ["Yes", "いいえ", ""]
        # 其它指令共享，输入未被修改
        assert commands[0] is common_events[1]["list"][0]
        assert common_events == snapshot

    @pytest.mark.parametrize("field", [
        "list[5].parameters[0]",      # 脚本指令不是文本
        "list[4].parameters[0]",      # 105 的参数 0 不是字符串
        "list[0].parameters[0]",      # 101 只有参数 4 可写
        "list[99].parameters[0]",
        "switchId",
        "list[1]",
        "not a path",
    ])
    def test_non_text_positions_dropped(self, common_events, field):
        file = data_file("CommonEvents.json", common_events)
        result = build_handler("commonevents").apply(file, [TranslationUnit("1", field, "", target="X")])
        assert result.content == common_events

    def test_apply_map_keeps_other_keys(self, map_data):
        file = data_file("Map001.json", map_data)
        result = build_handler("maps").apply(file, [
            TranslationUnit("1", "pages[0].list[0].parameters[0]", "Hello, traveler.", target="Hallo!"),
        ])
        assert result.content["events"][1]["pages"][0]["list"][0]["parameters"] == ["Hallo!"]
        assert result.content["data"] is map_data["data"]
        assert map_data["events"][1]["pages"][0]["list"][0]["parameters"] == ["Hello, traveler."]

    def test_round_trip_identity(self, troops):
        file = data_file("Troops.json", troops)
        handler = build_handler("troops")
        units = handler.extract(file)
        for u in units:
            u.target = u.source
        assert handler.apply(file, units).content == troops


class TestSystem:
    """测试 System.json"""

    def test_extraction(self, system_data):
        units = build_handler("system").extract(data_file("System.json", system_data))
        assert [(u.resource_id, u.field, u.source) for u in units] == [
            ("0", "gameTitle", "Quest"),
            ("0", "currencyUnit", "G"),
            ("0", "terms.messages.victory", "%1 was victorious!"),
            ("0", "elements[1]", "Physical"),
            ("0", "elements[2]", "Fire"),
            ("0", "switches[1]", "Door Open"),
            ("0", "terms.basic[0]", "Level"),
            ("0", "terms.basic[1]", "Lv"),
            ("0", "terms.commands[0]", "Fight"),
            ("0", "terms.params[0]", "Max HP"),
        ]

    def test_apply(self, system_data):
        snapshot = copy.deepcopy(system_data)
        result = build_handler("system").apply(data_file("System.json", system_data), [
            TranslationUnit("0", "terms.messages.victory", "", target="%1の勝利！"),
            TranslationUnit("0", "elements[2]", "Fire", target="炎"),
            TranslationUnit("0", "terms.messages.unknownKey", "", target="X"),
            TranslationUnit("1", "gameTitle", "Quest", target="X"),
            TranslationUnit("0", "windowTone[0]", "", target="X"),
        ])

        assert result.content["terms"]["messages"]["victory"] == "%1の勝利！"
        assert result.content["elements"] == ["", "Physical", "炎"]
        assert result.content["terms"]["messages"]["unknownKey"] == "ignored"
        assert result.content["gameTitle"] == "Quest"
        assert result.content["windowTone"] == [0, 0, 0, 0]
        assert system_data == snapshot

    def test_non_object_content(self):
        file = data_file("System.json", [None])
        handler = build_handler("system")
        assert handler.extract(file) == []
        assert handler.apply(file, [TranslationUnit("0", "gameTitle", "", target="X")]) is file


class TestMapFiles:
    """测试地图文件发现与读取"""

    def test_resource_type_of(self):
        assert resource_type_of("map001") == "maps"
        assert resource_type_of("map123") == "maps"
        assert resource_type_of("mapinfos") == "mapinfos"
        assert resource_type_of("actors") == "actors"

    def test_discover_from_map_infos(self):
        infos = data_file("MapInfos.json", [None, {"id": 3}, None, {"id": 1}, {"id": 0}])
        assert discover_map_files([infos]) == ["www/data/Map001.json", "www/data/Map003.json"]

    def test_engine_reads_and_applies_maps(self, tmp_path, map_data):
        data_dir = tmp_path / "www" / "data"
        data_dir.mkdir(parents=True)
        (data_dir / "MapInfos.json").write_text(json.dumps([None, {"id": 1, "name": "Village"}]), encoding="utf-8")
        (data_dir / "Map001.json").write_text(json.dumps(map_data), encoding="utf-8")

        engine = create_engine(resource_types=["mapinfos", "maps"])
        files = engine.read_project(tmp_path)
        assert [f.path for f in files] == ["www/data/MapInfos.json", "www/data/Map001.json"]

        units = engine.extract_translations(files)
        assert [(u.file, u.source) for u in units] == [
            ("www/data/MapInfos.json", "Village"),
            ("www/data/Map001.json", "Elder"),
            ("www/data/Map001.json", "Hello, traveler."),
        ]

        for u in units:
            u.target = u.source.upper()
        updated = engine.apply_translations(files, units)
        assert updated[1].content["events"][1]["name"] == "ELDER"

    def test_missing_map_file_is_fatal(self, tmp_path):
        from rpgm_tools.utils.logger import ProjectReadError

        data_dir = tmp_path / "www" / "data"
        data_dir.mkdir(parents=True)
        (data_dir / "MapInfos.json").write_text(json.dumps([None, {"id": 2}]), encoding="utf-8")

        with pytest.raises(ProjectReadError, match="Map002.json"):
            create_engine(resource_types=["maps"]).read_project(tmp_path)
