"""
Club Stats QA - Query Builder

Cypher query shapes for every metric/qualifier combination. User input
only ever reaches the store through query parameters.

Graph shape:
    (p:Player)-[:PLAYED_IN]->(md:MatchDetail)<-[:HAS_MATCH_DETAILS]-(f:Fixture)
Stored per-player counters live on the Player node; qualified questions
aggregate MatchDetail rows instead.
"""

import logging
from typing import Dict, List, Tuple, Any

from club_stats_qa.models import EntityType, Qualifiers

logger = logging.getLogger("club_stats_qa")

Query = Tuple[str, Dict[str, Any]]


# ============ CORPUS QUERIES ============

CORPUS_QUERIES: Dict[EntityType, str] = {
    EntityType.PLAYER: (
        "MATCH (p:Player) WHERE p.graphLabel = $graphLabel AND p.playerName IS NOT NULL "
        "RETURN DISTINCT p.playerName AS entityName ORDER BY entityName"
    ),
    EntityType.TEAM: (
        "MATCH (t:Team) WHERE t.graphLabel = $graphLabel AND t.teamName IS NOT NULL "
        "RETURN DISTINCT t.teamName AS entityName ORDER BY entityName"
    ),
    EntityType.OPPOSITION: (
        "MATCH (o:Opposition) WHERE o.graphLabel = $graphLabel AND o.oppositionName IS NOT NULL "
        "RETURN DISTINCT o.oppositionName AS entityName ORDER BY entityName"
    ),
    EntityType.LEAGUE: (
        "MATCH (l:League) WHERE l.graphLabel = $graphLabel AND l.leagueName IS NOT NULL "
        "RETURN DISTINCT l.leagueName AS entityName ORDER BY entityName"
    ),
}


def build_corpus_query(entity_type: EntityType, graph_label: str) -> Query:
    return CORPUS_QUERIES[entity_type], {"graphLabel": graph_label}


# ============ METRIC EXPRESSIONS ============

# Stored counters on the Player node
PLAYER_PROPERTIES: Dict[str, str] = {
    "APP": "appearances",
    "MIN": "minutes",
    "MOM": "mom",
    "G": "allGoalsScored",
    "OPENPLAYGOALS": "goals",
    "A": "assists",
    "Y": "yellowCards",
    "R": "redCards",
    "SAVES": "saves",
    "OG": "ownGoals",
    "C": "conceded",
    "CLS": "cleanSheets",
    "PSC": "penaltiesScored",
    "PM": "penaltiesMissed",
    "PCO": "penaltiesConceded",
    "PSV": "penaltiesSaved",
}

# Aggregations over MatchDetail rows
AGGREGATIONS: Dict[str, str] = {
    "APP": "count(md)",
    "MIN": "sum(coalesce(md.minutes, 0))",
    "MOM": "sum(coalesce(toInteger(md.mom), 0))",
    "G": "sum(coalesce(md.goals, 0)) + sum(coalesce(md.penaltiesScored, 0))",
    "OPENPLAYGOALS": "sum(coalesce(md.goals, 0))",
    "A": "sum(coalesce(md.assists, 0))",
    "Y": "sum(coalesce(md.yellowCards, 0))",
    "R": "sum(coalesce(md.redCards, 0))",
    "SAVES": "sum(coalesce(md.saves, 0))",
    "OG": "sum(coalesce(md.ownGoals, 0))",
    "C": "sum(coalesce(md.conceded, 0))",
    "CLS": "sum(coalesce(md.cleanSheets, 0))",
    "PSC": "sum(coalesce(md.penaltiesScored, 0))",
    "PM": "sum(coalesce(md.penaltiesMissed, 0))",
    "PCO": "sum(coalesce(md.penaltiesConceded, 0))",
    "PSV": "sum(coalesce(md.penaltiesSaved, 0))",
}

# Raw sums every derived metric is computed from
DERIVED_COMPONENTS: Dict[str, str] = {
    "appearances": AGGREGATIONS["APP"],
    "minutes": AGGREGATIONS["MIN"],
    "goals": AGGREGATIONS["G"],
    "assists": AGGREGATIONS["A"],
    "conceded": AGGREGATIONS["C"],
    "penaltiesScored": AGGREGATIONS["PSC"],
    "penaltiesMissed": AGGREGATIONS["PM"],
}


# ============ QUERY SHAPES ============

def _base_match(qualifiers: Qualifiers) -> Tuple[str, Dict[str, Any]]:
    """MATCH clause + WHERE conditions for a qualified per-match traversal."""
    lines = [
        "MATCH (p:Player {graphLabel: $graphLabel, playerName: $playerName})-[:PLAYED_IN]->(md:MatchDetail)",
        "MATCH (f:Fixture)-[:HAS_MATCH_DETAILS]->(md)",
    ]
    conditions: List[str] = []
    params: Dict[str, Any] = {}

    if qualifiers.team:
        conditions.append("md.team = $team")
        params["team"] = qualifiers.team
    if qualifiers.season:
        conditions.append("f.season = $season")
        params["season"] = qualifiers.season
    if qualifiers.location:
        conditions.append("f.homeOrAway = $homeOrAway")
        params["homeOrAway"] = qualifiers.location.capitalize()
    if qualifiers.position:
        conditions.append("md.class = $position")
        params["position"] = qualifiers.position
    if qualifiers.opposition:
        conditions.append("toLower(f.opposition) = toLower($opposition)")
        params["opposition"] = qualifiers.opposition

    if conditions:
        lines.append("WHERE " + " AND ".join(conditions))
    return "\n".join(lines), params


def build_counter_query(player_name: str, metric: str, qualifiers: Qualifiers, graph_label: str) -> Query:
    """
    Single stored or aggregated counter for one player.

    Unqualified questions read the Player node directly; any qualifier
    switches to aggregating MatchDetail rows.
    """
    if qualifiers.is_empty():
        prop = PLAYER_PROPERTIES[metric]
        query = (
            "MATCH (p:Player {graphLabel: $graphLabel, playerName: $playerName})\n"
            f"RETURN coalesce(p.{prop}, 0) AS value"
        )
        params: Dict[str, Any] = {}
    else:
        match, params = _base_match(qualifiers)
        query = f"{match}\nRETURN {AGGREGATIONS[metric]} AS value"

    params.update({"graphLabel": graph_label, "playerName": player_name})
    logger.debug(f"Counter query for {metric}: {query!r}")
    return query, params


def build_derived_query(player_name: str, qualifiers: Qualifiers, graph_label: str) -> Query:
    """Raw sums (appearances, goals, minutes, ...) needed by derived metrics."""
    match, params = _base_match(qualifiers)
    returns = ",\n       ".join(f"{expr} AS {alias}" for alias, expr in DERIVED_COMPONENTS.items())
    query = f"{match}\nRETURN {returns}"
    params.update({"graphLabel": graph_label, "playerName": player_name})
    logger.debug(f"Derived query: {query!r}")
    return query, params


def build_match_events_query(player_name: str, qualifiers: Qualifiers, graph_label: str) -> Query:
    """One row per appearance with every field the fantasy ruleset reads."""
    match, params = _base_match(qualifiers)
    query = (
        f"{match}\n"
        "RETURN md.minutes AS minutes, md.mom AS mom, md.goals AS goals, md.assists AS assists,\n"
        "       md.yellowCards AS yellowCards, md.redCards AS redCards, md.saves AS saves,\n"
        "       md.ownGoals AS ownGoals, md.penaltiesScored AS penaltiesScored,\n"
        "       md.penaltiesMissed AS penaltiesMissed, md.penaltiesConceded AS penaltiesConceded,\n"
        "       md.penaltiesSaved AS penaltiesSaved, md.conceded AS teamConceded, md.class AS class,\n"
        "       f.season + ' vs ' + coalesce(f.opposition, '?') AS fixture, md.date AS date\n"
        "ORDER BY md.date ASC"
    )
    params.update({"graphLabel": graph_label, "playerName": player_name})
    return query, params
