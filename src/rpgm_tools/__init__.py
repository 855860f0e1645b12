"""
RPG Maker 游戏数据翻译工具集

- 校验、读取 RPG Maker 工程数据
- 提取可翻译文本并回填译文
- 带指数退避的翻译调度与统计
"""

__version__ = "0.1.0"
__all__ = ["utils", "core", "engines", "cli"]
