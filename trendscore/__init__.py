"""Trending score engine for content items."""

from trendscore.calculator import TrendCalculator
from trendscore.period import PeriodType
from trendscore.version import __version__

__all__ = ["PeriodType", "TrendCalculator", "__version__"]
