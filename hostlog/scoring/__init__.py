"""
Visibility scoring module.
"""

from hostlog.scoring.engine import VisibilityScoringEngine, top_host_scores, weighted_severity

__all__ = ["VisibilityScoringEngine", "top_host_scores", "weighted_severity"]
