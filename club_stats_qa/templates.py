"""
Club Stats QA - Response Templates

Renders answer sentences from the template catalog. Rendered strings are
cached in a bounded LRU keyed by template key + serialized variables;
the cache has no effect on output.
"""

import json
import re
import logging
from typing import Optional, Dict, Any

from club_stats_qa.cache import LRUCache
from club_stats_qa.config import QA_CONFIG, TemplateConfig
from club_stats_qa.calculators import round_half_up
from club_stats_qa.constants import RESPONSE_TEMPLATES, ZERO_STAT_PHRASES, get_metric_config, get_metric_display_name
from club_stats_qa.models import Qualifiers

logger = logging.getLogger("club_stats_qa")

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


class ResponseTemplateManager:
    def __init__(
        self,
        templates: Optional[Dict[str, str]] = None,
        config: Optional[TemplateConfig] = None,
    ):
        self.templates = dict(templates or RESPONSE_TEMPLATES)
        self.config = config or QA_CONFIG["templates"]
        self.cache = LRUCache(self.config.cache_capacity)

    def has_template(self, key: str) -> bool:
        return key in self.templates

    def render(self, key: str, variables: Optional[Dict[str, Any]] = None) -> str:
        """
        Substitute every {{name}} in the template. Unknown placeholders stay
        as literal text.

        Raises:
            KeyError: unknown template key
        """
        if key not in self.templates:
            raise KeyError(f"Unknown response template: {key}")
        variables = variables or {}

        cache_key = f"{key}:{json.dumps(variables, sort_keys=True, default=str)}"
        if self.config.cache_enabled:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return cached

        def substitute(match: "re.Match") -> str:
            name = match.group(1)
            return str(variables[name]) if name in variables else match.group(0)

        rendered = _PLACEHOLDER.sub(substitute, self.templates[key])
        if self.config.cache_enabled:
            self.cache.set(cache_key, rendered)
        return rendered

    def clear_cache(self):
        self.cache.clear()
        logger.info("Template cache cleared")

    def clear_by_prefix(self, prefix: str) -> int:
        removed = self.cache.clear_by_prefix(prefix)
        logger.info(f"Template cache: removed {removed} entries with prefix '{prefix}'")
        return removed


# ============ FORMATTING HELPERS ============

def format_metric_value(metric: str, value: float) -> str:
    """Counters as integers, ratios to their configured decimals, rates as percentages."""
    config = get_metric_config(metric) or {}
    places = config.get("decimal_places", 0)
    if config.get("stat_format") == "Percentage":
        return f"{value:.{places}f}%"
    if places == 0:
        return str(round_half_up(value))
    return f"{value:.{places}f}"


def metric_wording(metric: str, value: float) -> str:
    """Singular wording for exactly 1, plural otherwise."""
    return get_metric_display_name(metric, value)


def zero_stat_phrase(metric: str) -> Optional[str]:
    return ZERO_STAT_PHRASES.get(metric)


def build_context(qualifiers: Qualifiers) -> str:
    """
    Trailing sentence context for the qualifiers in play, e.g.
    " for the 3rd XI in 2019/20 at home against Old Boys". Empty when none.
    """
    parts = []
    if qualifiers.team:
        parts.append(f"for the {qualifiers.team}")
    if qualifiers.season:
        parts.append(f"in {qualifiers.season}")
    if qualifiers.location == "home":
        parts.append("at home")
    elif qualifiers.location == "away":
        parts.append("away from home")
    if qualifiers.position:
        parts.append(f"as a {qualifiers.position}")
    if qualifiers.opposition:
        parts.append(f"against {qualifiers.opposition}")
    return " " + " ".join(parts) if parts else ""
