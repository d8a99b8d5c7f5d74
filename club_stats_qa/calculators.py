"""
Club Stats QA - Calculators Module

Fantasy points scoring over per-match events, and the arithmetic behind
derived metrics (goal involvements, per-appearance ratios, minutes per
goal, penalty conversion rate).
"""

import math
from typing import Optional, Dict, List, Iterable

from club_stats_qa.config import QA_CONFIG, FantasyConfig
from club_stats_qa.models import MatchEvent, FantasyBreakdownItem, ZeroAppearances

__all__ = [
    # Scoring
    "FantasyPointsCalculator",
    "round_half_up",
    # Derived metrics
    "compute_derived_metric",
]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# FANTASY POINTS
# =============================================================================

class FantasyPointsCalculator:
    """
    Position-aware fantasy points for a player's match events.

    Every category contributes independently and unrounded; the total is
    rounded once, after summing all events. Points are always recomputed
    from events, never read from a stored total.
    """

    def __init__(self, config: Optional[FantasyConfig] = None):
        self.config = config or QA_CONFIG["fantasy"]

    def breakdown(self, event: MatchEvent) -> List[FantasyBreakdownItem]:
        cfg = self.config
        position = (event.position or "").upper()
        items: List[FantasyBreakdownItem] = []

        def add(label: str, count: float, per_unit: float, points: Optional[float] = None):
            pts = count * per_unit if points is None else points
            items.append(FantasyBreakdownItem(
                stat_label=label, count=count, points_per_unit=per_unit, points=pts, show=count > 0,
            ))

        if event.minutes >= cfg.minutes_full_threshold:
            minutes_points = cfg.minutes_full_points
        elif event.minutes > 0:
            minutes_points = cfg.minutes_partial_points
        else:
            minutes_points = 0
        add("Minutes played", event.minutes, minutes_points, points=minutes_points)

        add("Man of the Match", event.man_of_match, cfg.man_of_match_points)
        add("Goals scored", event.goals + event.penalties_scored, cfg.goal_points.get(position, 0))
        add("Assists", event.assists, cfg.assist_points)

        # Clean sheet comes from the team's fixture result, not the player row
        clean_sheet = 1 if event.team_conceded == 0 and event.minutes > 0 else 0
        add("Clean Sheets", clean_sheet, cfg.clean_sheet_points.get(position, 0))
        add("Goals Conceded", event.team_conceded, cfg.conceded_points.get(position, 0))

        add("Yellow Cards", event.yellow_cards, cfg.yellow_card_points)
        add("Red Cards", event.red_cards, cfg.red_card_points)
        add("Saves", event.saves, 1 / cfg.saves_per_point, points=event.saves // cfg.saves_per_point)
        add("Own Goals", event.own_goals, cfg.own_goal_points)
        add("Penalties Missed", event.penalties_missed, cfg.penalty_missed_points)
        add("Penalties Conceded", event.penalties_conceded, cfg.penalty_conceded_points)
        add("Penalties Saved", event.penalties_saved, cfg.penalty_saved_points)
        return items

    def match_points(self, event: MatchEvent) -> float:
        """Unrounded points for one event."""
        return sum(item.points for item in self.breakdown(event))

    def unrounded_total(self, events: Iterable[MatchEvent]) -> float:
        return sum(self.match_points(e) for e in events)

    def total(self, events: Iterable[MatchEvent]) -> int:
        return round_half_up(self.unrounded_total(events))


# =============================================================================
# DERIVED METRICS
# =============================================================================

def compute_derived_metric(metric: str, components: Dict[str, float], entity: str = "") -> float:
    """
    Derived metric value from raw sums.

    components keys: appearances, minutes, goals, assists, conceded,
    penaltiesScored, penaltiesMissed (missing keys count as 0).

    Raises:
        ZeroAppearances: a per-appearance metric with no appearances
    """
    c = {k: float(v or 0) for k, v in components.items()}
    appearances = c.get("appearances", 0)
    goals = c.get("goals", 0)

    if metric == "GI":
        return goals + c.get("assists", 0)

    if appearances == 0:
        raise ZeroAppearances(entity, metric)

    if metric == "GPERAPP":
        return goals / appearances
    if metric == "CPERAPP":
        return c.get("conceded", 0) / appearances
    if metric == "MPERG":
        # No goals yet: reported through the zero-value phrasing
        return c.get("minutes", 0) / goals if goals else 0.0
    if metric == "PENALTY_CONVERSION_RATE":
        taken = c.get("penaltiesScored", 0) + c.get("penaltiesMissed", 0)
        return c.get("penaltiesScored", 0) / taken * 100 if taken else 0.0

    raise ValueError(f"Not a derived metric: {metric}")
