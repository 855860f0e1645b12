"""
翻译统计聚合

累计 token、费用、耗时、质量分数与成功/失败计数。
质量分数以原始累加和 + 计数保存，平均值在读取时计算，
因此对同一聚合多次调用 update_stats 或合并两个聚合都不会重复计算。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import TranslationUnit


@dataclass
class TranslationStats:
    """一批翻译的运行统计（processing_time 单位：秒）"""

    total_tokens: int = 0
    total_cost: float = 0.0
    total_processing_time: float = 0.0
    successful_translations: int = 0
    failed_translations: int = 0
    quality_sum: float = 0.0
    quality_count: int = 0

    @property
    def average_confidence(self) -> float:
        if self.quality_count == 0:
            return 0.0
        return self.quality_sum / self.quality_count

    @property
    def total_translations(self) -> int:
        return self.successful_translations + self.failed_translations

    @property
    def success_rate(self) -> float:
        total = self.total_translations
        return self.successful_translations / total if total else 0.0

    @property
    def average_time_per_item(self) -> float:
        if self.successful_translations == 0:
            return 0.0
        return self.total_processing_time / self.successful_translations


def create_stats() -> TranslationStats:
    return TranslationStats()


def update_stats(stats: TranslationStats, translations: Iterable[TranslationUnit]) -> TranslationStats:
    """把一组翻译结果累加进 stats（原地更新并返回同一对象）

    - tokens 存在时累加 total
    - metadata 存在时累加耗时与费用；有质量分数时计入质量累加和
    - target 非空计为成功，否则计为失败
    """
    for unit in translations:
        if unit.tokens is not None:
            stats.total_tokens += unit.tokens.total
        if unit.metadata is not None:
            stats.total_processing_time += unit.metadata.processing_time
            if unit.metadata.cost is not None:
                stats.total_cost += unit.metadata.cost
            if unit.metadata.quality_score is not None:
                stats.quality_sum += unit.metadata.quality_score
                stats.quality_count += 1
        if unit.target:
            stats.successful_translations += 1
        else:
            stats.failed_translations += 1
    return stats


def merge_stats(a: TranslationStats, b: TranslationStats) -> TranslationStats:
    """合并两个聚合（基于原始累加和，返回新对象）"""
    return TranslationStats(
        total_tokens=a.total_tokens + b.total_tokens,
        total_cost=a.total_cost + b.total_cost,
        total_processing_time=a.total_processing_time + b.total_processing_time,
        successful_translations=a.successful_translations + b.successful_translations,
        failed_translations=a.failed_translations + b.failed_translations,
        quality_sum=a.quality_sum + b.quality_sum,
        quality_count=a.quality_count + b.quality_count,
    )


def format_duration(seconds: float) -> str:
    """格式化耗时：<1s 显示毫秒，<60s 显示秒，否则显示分钟"""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{seconds / 60:.1f}min"


def format_stats(stats: TranslationStats) -> dict[str, str]:
    """生成用于展示的统计摘要"""
    return {
        "totalTranslations": str(stats.total_translations),
        "successRate": f"{stats.success_rate * 100:.1f}%",
        "averageConfidence": f"{stats.average_confidence * 100:.1f}%",
        "totalCost": f"${stats.total_cost:.4f}",
        "processingTime": format_duration(stats.total_processing_time),
        "averageTime": format_duration(stats.average_time_per_item),
        "tokensUsed": f"{stats.total_tokens:,}",
    }
