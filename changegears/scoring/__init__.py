"""
Ranking of gear train results.
"""

from changegears.scoring.ranking import compare_gear_trains, rank_gear_trains, match_percentage

__all__ = ["compare_gear_trains", "rank_gear_trains", "match_percentage"]
