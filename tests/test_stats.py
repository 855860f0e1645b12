"""
统计聚合测试
"""

import pytest

from rpgm_tools.core import (
    TokenUsage, TranslationMeta, TranslationUnit, create_stats, format_stats, merge_stats, update_stats,
)
from rpgm_tools.core.stats import format_duration


def unit(target="", tokens=None, quality=None, time=0.0, cost=None, with_meta=True):
    meta = TranslationMeta(processing_time=time, quality_score=quality, cost=cost) if with_meta else None
    return TranslationUnit(
        "1", "name", "src", target=target,
        tokens=TokenUsage(total=tokens) if tokens is not None else None,
        metadata=meta,
    )


class TestUpdateStats:
    """测试 update_stats"""

    def test_zeroed(self):
        stats = create_stats()
        assert stats.total_tokens == 0
        assert stats.total_cost == 0
        assert stats.average_confidence == 0
        assert stats.success_rate == 0
        assert stats.average_time_per_item == 0

    def test_counts_success_and_failure(self):
        stats = update_stats(create_stats(), [unit("a"), unit(""), unit("b")])
        assert stats.successful_translations == 2
        assert stats.failed_translations == 1
        assert stats.total_translations == 3

    def test_tokens_time_and_cost(self):
        stats = update_stats(create_stats(), [
            unit("a", tokens=10, time=0.5, cost=0.01),
            unit("b", tokens=5, with_meta=False),
        ])
        assert stats.total_tokens == 15
        assert stats.total_processing_time == pytest.approx(0.5)
        assert stats.total_cost == pytest.approx(0.01)

    def test_average_only_over_scored_units(self):
        stats = update_stats(create_stats(), [
            unit("a", quality=0.9),
            unit("b", quality=0.7),
            unit("c", with_meta=False),
        ])
        assert stats.average_confidence == pytest.approx(0.8)

    def test_repeated_calls_do_not_double_count(self):
        """测试多次增量调用与一次性调用结果一致"""
        batch_a = [unit("a", quality=1.0), unit("b", quality=0.5)]
        batch_b = [unit("c", quality=0.0)]

        incremental = create_stats()
        update_stats(incremental, batch_a)
        update_stats(incremental, batch_b)

        once = update_stats(create_stats(), batch_a + batch_b)

        assert incremental == once
        assert incremental.average_confidence == pytest.approx(0.5)


class TestMergeStats:
    """测试 merge_stats"""

    def test_merge_uses_raw_sums(self):
        a = update_stats(create_stats(), [unit("x", quality=1.0)] * 3)
        b = update_stats(create_stats(), [unit("y", quality=0.0)])
        merged = merge_stats(a, b)

        assert merged.average_confidence == pytest.approx(0.75)
        assert merged.successful_translations == 4
        # 原对象不变
        assert a.successful_translations == 3


class TestFormatStats:
    """测试展示格式"""

    @pytest.mark.parametrize("seconds,expected", [
        (0.25, "250ms"),
        (12.34, "12.3s"),
        (90, "1.5min"),
    ])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_format_stats(self):
        stats = update_stats(create_stats(), [
            unit("a", tokens=1200, quality=0.9, time=2.0, cost=0.0123),
            unit(""),
        ])
        summary = format_stats(stats)
        assert summary["totalTranslations"] == "2"
        assert summary["successRate"] == "50.0%"
        assert summary["averageConfidence"] == "90.0%"
        assert summary["totalCost"] == "$0.0123"
        assert summary["averageTime"] == "2.0s"
        assert summary["tokensUsed"] == "1,200"
