"""
引擎注册表与工程检测测试
"""

import pytest

from rpgm_tools.core import Engine, EngineRegistry, create_default_registry
from rpgm_tools.engines import DetectionResult, detect_rpgmv_project
from rpgm_tools.engines.rpgmv import RESOURCE_TYPES, build_settings
from rpgm_tools.utils.logger import ConfigurationError, UnsupportedEngineError


class TestEngineRegistry:
    """测试 EngineRegistry"""

    def test_engine_is_memoized(self):
        calls = []

        def factory():
            calls.append(1)
            return Engine(build_settings(["actors"]), [])

        registry = EngineRegistry()
        registry.register("fake", factory)

        first = registry.get_engine("fake")
        assert registry.get_engine("fake") is first
        assert len(calls) == 1

    def test_unsupported_engine(self):
        registry = EngineRegistry()
        with pytest.raises(UnsupportedEngineError) as exc_info:
            registry.get_engine("rpgvx")
        assert exc_info.value.engine_type == "rpgvx"
        assert isinstance(exc_info.value, ConfigurationError)

    def test_is_supported_agrees_with_get_engine(self):
        registry = create_default_registry()
        for engine_type in ("rpgmv", "rpgmz", "", "RPGMV"):
            if registry.is_supported(engine_type):
                assert registry.get_engine(engine_type) is not None
            else:
                with pytest.raises(UnsupportedEngineError):
                    registry.get_engine(engine_type)

    def test_registries_are_isolated(self):
        a = create_default_registry()
        b = create_default_registry()
        assert a.get_engine("rpgmv") is not b.get_engine("rpgmv")

    def test_reregister_drops_cached_instance(self):
        registry = create_default_registry()
        old = registry.get_engine("rpgmv")
        registry.register("rpgmv", lambda: Engine(build_settings(["items"]), []))
        assert registry.get_engine("rpgmv") is not old

    def test_default_engine_settings(self):
        engine = create_default_registry().get_engine("rpgmv")
        assert engine.name == "RPG Maker MV"
        assert engine.settings.anchor_dir == "www/data"
        assert "www/data/Actors.json" in engine.settings.required_files
        assert "www/data/System.json" in engine.settings.required_files
        assert engine.settings.translatable_types == frozenset(RESOURCE_TYPES)
        assert set(engine.handlers) == set(RESOURCE_TYPES)


class TestDetection:
    """测试工程检测"""

    def test_detect_by_www_data(self, rpgmv_project):
        assert detect_rpgmv_project(rpgmv_project) is DetectionResult.BY_WWW_DATA
        assert create_default_registry().detect(rpgmv_project) == "rpgmv"

    def test_detect_by_project_file(self, tmp_path):
        (tmp_path / "Game.rpgproject").write_text("RPGMV 1.6.2", encoding="utf-8")
        assert detect_rpgmv_project(tmp_path) is DetectionResult.BY_PROJECT_FILE

    def test_not_detected(self, tmp_path):
        assert detect_rpgmv_project(tmp_path) is DetectionResult.NOT_DETECTED
        assert create_default_registry().detect(tmp_path) is None

    def test_unknown_resource_type_rejected(self):
        with pytest.raises(ConfigurationError):
            build_settings(["actors", "tilesets"])
