"""Pricing table and the quote estimator.

The table is loaded once at start-up (defaults from `ndawonga.config`, or a
JSON override) and never mutated afterwards, so it can be shared freely
between request threads.

    estimate = area * base_rate(category) * multiplier(complexity) * (1 + contingency)
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import ndawonga.config as cfg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingRule:
    """Base rate (ZAR per m²) for one project category."""

    category: str
    base_rate: float


@dataclass(frozen=True)
class ComplexityMultiplier:
    """Scalar applied to the base cost for a difficulty tier."""

    level: str
    factor: float


@dataclass(frozen=True)
class PricingTable:
    rules: Mapping[str, PricingRule]
    multipliers: Mapping[str, ComplexityMultiplier]
    contingency_rate: float = cfg.CONTINGENCY_RATE
    default_category: str = cfg.DEFAULT_CATEGORY
    default_complexity: str = cfg.DEFAULT_COMPLEXITY
    source: str = field(default="defaults", compare=False)

    def rule_for(self, category: Optional[str]) -> PricingRule:
        """Exact (case-sensitive) match, else the default category's rule."""
        rule = self.rules.get(category) if category is not None else None
        return rule or self.rules[self.default_category]

    def multiplier_for(self, complexity: Optional[str]) -> ComplexityMultiplier:
        m = self.multipliers.get(complexity) if complexity is not None else None
        return m or self.multipliers[self.default_complexity]

    def categories(self) -> List[str]:
        return list(self.rules.keys())

    def as_dict(self) -> Dict[str, Any]:
        return {
            "categories": [
                {"category": r.category, "base_rate": r.base_rate} for r in self.rules.values()
            ],
            "complexity_multipliers": {m.level: m.factor for m in self.multipliers.values()},
            "contingency_rate": self.contingency_rate,
            "default_category": self.default_category,
            "default_complexity": self.default_complexity,
        }


def build_pricing_table(
    base_rates: Mapping[str, float],
    multipliers: Mapping[str, float],
    contingency_rate: float = cfg.CONTINGENCY_RATE,
    *,
    default_category: str = cfg.DEFAULT_CATEGORY,
    default_complexity: str = cfg.DEFAULT_COMPLEXITY,
    source: str = "defaults",
) -> PricingTable:
    """Validate raw mappings and freeze them into a PricingTable.

    Raises ValueError when a fallback entry is missing or a number is negative.
    """
    if default_category not in base_rates:
        raise ValueError(f"Pricing table must define the default category {default_category!r}")
    if default_complexity not in multipliers:
        raise ValueError(
            f"Pricing table must define the default complexity {default_complexity!r}"
        )

    rules: Dict[str, PricingRule] = {}
    for category, rate in base_rates.items():
        rate = float(rate)
        if rate < 0 or not math.isfinite(rate):
            raise ValueError(f"Invalid base rate for {category!r}: {rate}")
        rules[category] = PricingRule(category=category, base_rate=rate)

    factors: Dict[str, ComplexityMultiplier] = {}
    for level, factor in multipliers.items():
        factor = float(factor)
        if factor < 0 or not math.isfinite(factor):
            raise ValueError(f"Invalid complexity multiplier for {level!r}: {factor}")
        factors[level] = ComplexityMultiplier(level=level, factor=factor)

    contingency_rate = float(contingency_rate)
    if contingency_rate < 0 or not math.isfinite(contingency_rate):
        raise ValueError(f"Invalid contingency rate: {contingency_rate}")

    return PricingTable(
        rules=MappingProxyType(rules),
        multipliers=MappingProxyType(factors),
        contingency_rate=contingency_rate,
        default_category=default_category,
        default_complexity=default_complexity,
        source=source,
    )


def default_pricing_table() -> PricingTable:
    return build_pricing_table(cfg.BASE_RATES, cfg.COMPLEXITY_MULTIPLIERS, cfg.CONTINGENCY_RATE)


def load_pricing_table(path: Optional[str] = None) -> PricingTable:
    """Load the pricing table, optionally overriding defaults from a JSON file.

    The file may carry any of `base_rates`, `complexity_multipliers` and
    `contingency_rate`; missing keys keep their defaults.
    """
    if not path:
        return default_pricing_table()

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Pricing file {path} must contain a JSON object")

    table = build_pricing_table(
        data.get("base_rates", cfg.BASE_RATES),
        data.get("complexity_multipliers", cfg.COMPLEXITY_MULTIPLIERS),
        data.get("contingency_rate", cfg.CONTINGENCY_RATE),
        source=path,
    )
    logger.info("Loaded pricing table from %s (%d categories)", path, len(table.rules))
    return table


_DEFAULT_TABLE = default_pricing_table()


def clamp_area(value: Any) -> float:
    """Coerce a user-supplied area to a safe non-negative float.

    Bad input becomes 0; very large areas are capped at MAX_AREA_SQ_M so the
    estimate stays finite.
    """
    try:
        area = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(area) or area < 0:
        return 0.0
    return min(area, cfg.MAX_AREA_SQ_M)


def estimate(
    category: Optional[str],
    area_sq_m: float,
    complexity: Optional[str],
    table: Optional[PricingTable] = None,
) -> float:
    """Estimated cost in ZAR. Not rounded.

    `area_sq_m` must already be non-negative (see `clamp_area`).
    """
    t = table or _DEFAULT_TABLE
    rate = t.rule_for(category).base_rate
    factor = t.multiplier_for(complexity).factor
    return area_sq_m * rate * factor * (1 + t.contingency_rate)
