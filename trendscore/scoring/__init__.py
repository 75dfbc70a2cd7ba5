"""Score computation: aggregation, trend estimation, decay, strategies."""

from trendscore.scoring.strategies import scoreApprox, scoreDirect, scoreFullPipeline

__all__ = ["scoreApprox", "scoreDirect", "scoreFullPipeline"]
