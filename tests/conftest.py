"""
Pytest 配置文件

为所有测试配置共享的 fixtures 和设置
"""

import json
import sys
from pathlib import Path

import pytest

# 添加 src 到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


def make_actor(actor_id, name="", nickname="", profile="", note=""):
    """构造一条 RPG Maker MV 角色记录（含非翻译字段）"""
    return {
        "id": actor_id,
        "battlerName": f"Actor{actor_id}_1",
        "characterIndex": 0,
        "characterName": "Actor1",
        "classId": 1,
        "equips": [1, 1, 2, 3, 0],
        "faceIndex": 0,
        "faceName": "Actor1",
        "traits": [],
        "initialLevel": 1,
        "maxLevel": 99,
        "name": name,
        "nickname": nickname,
        "note": note,
        "profile": profile,
    }


@pytest.fixture
def actors_content():
    """Actors.json 内容：下标 0 为保留空位"""
    return [
        None,
        make_actor(1, name="Harold", profile="A brave knight."),
        make_actor(2, name="Therese", nickname="The Sage", note="<hp:100>"),
    ]


@pytest.fixture
def items_content():
    return [
        None,
        {"id": 1, "name": "Potion", "description": "Restores 500 HP.", "note": "",
         "iconIndex": 176, "price": 50, "consumable": True, "effects": [], "itypeId": 1},
    ]


@pytest.fixture
def rpgmv_project(tmp_path, actors_content, items_content):
    """在磁盘上创建一个最小的 RPG Maker MV 工程"""
    data_dir = tmp_path / "game" / "www" / "data"
    data_dir.mkdir(parents=True)
    (data_dir / "Actors.json").write_text(json.dumps(actors_content), encoding="utf-8")
    (data_dir / "Items.json").write_text(json.dumps(items_content), encoding="utf-8")
    return tmp_path / "game"
