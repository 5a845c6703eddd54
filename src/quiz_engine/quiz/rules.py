"""
Result rules

A rule is a single level of conjunction (`all`) or disjunction (`any`) over
conditions. Each condition either bounds a category score or tests tag
membership. Raw rule data is parsed once, at load time, into the variants
below; evaluation only ever sees the variants.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

logger = logging.getLogger(__name__)


def to_number(value: Any) -> float:
    """
    Coerce a configuration value to a number.

    Booleans count as 0/1, numeric strings are parsed, blank strings are 0.
    Anything else is NaN, which fails every comparison.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


@dataclass(frozen=True)
class CategoryBound:
    """Every present bound must hold against the category's score."""
    category: str
    gte: Optional[float] = None
    lte: Optional[float] = None
    eq: Optional[float] = None

    def matches(self, scores: Mapping[str, float], tags: Iterable[str]) -> bool:
        score = scores.get(self.category, 0)
        if self.gte is not None and not score >= self.gte:
            return False
        if self.lte is not None and not score <= self.lte:
            return False
        if self.eq is not None and not score == self.eq:
            return False
        return True


@dataclass(frozen=True)
class TagMembership:
    """True when any of the tags has been collected. Empty never matches."""
    tags: frozenset = field(default_factory=frozenset)

    def matches(self, scores: Mapping[str, float], tags: Iterable[str]) -> bool:
        return not self.tags.isdisjoint(tags)


Condition = Union[CategoryBound, TagMembership]


@dataclass(frozen=True)
class Conjunction:
    """`all`: every condition holds. Empty is true."""
    conditions: tuple = ()


@dataclass(frozen=True)
class Disjunction:
    """`any`: at least one condition holds. Empty is false."""
    conditions: tuple = ()


@dataclass(frozen=True)
class InvalidRule:
    """Anything that isn't a recognised rule. Never matches."""
    reason: str = ""


Rule = Union[Conjunction, Disjunction, InvalidRule]


def _parse_bound(cond: Mapping, key: str) -> Optional[float]:
    if cond.get(key) is None:
        return None
    return to_number(cond[key])


def parse_condition(raw: Any) -> Condition:
    """Build a Condition from raw configuration data."""
    if not isinstance(raw, Mapping):
        logger.warning(f"Quiz: Invalid condition format {raw!r}")
        return TagMembership()

    category = raw.get("category")
    if category:
        return CategoryBound(
            category=str(category),
            gte=_parse_bound(raw, "gte"),
            lte=_parse_bound(raw, "lte"),
            eq=_parse_bound(raw, "eq"),
        )

    tags = raw.get("tags")
    if tags:
        if isinstance(tags, str):
            tags = [tags]
        elif not isinstance(tags, (list, tuple, set, frozenset)):
            tags = [tags]
        return TagMembership(frozenset(str(t) for t in tags))

    # Neither a category nor tags
    return TagMembership()


def parse_rule(raw: Any) -> Rule:
    """
    Build a Rule from raw configuration data.

    Args:
        raw: Mapping with an `all` or `any` list, or a JSON string of one

    Returns:
        Conjunction, Disjunction, or InvalidRule when the shape is wrong
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Quiz: Unparsable rule {raw!r}: {e}")
            return InvalidRule("unparsable")

    if not isinstance(raw, Mapping):
        return InvalidRule("not an object")

    if isinstance(raw.get("all"), list):
        return Conjunction(tuple(parse_condition(c) for c in raw["all"]))
    if isinstance(raw.get("any"), list):
        return Disjunction(tuple(parse_condition(c) for c in raw["any"]))

    return InvalidRule("missing all/any")


def evaluate(rule: Rule, scores: Mapping[str, float], tags: Iterable[str]) -> bool:
    """
    Evaluate a rule against accumulated scores and tags.

    Never raises for a malformed rule; it simply doesn't match.
    """
    tags = frozenset(tags)
    if isinstance(rule, Conjunction):
        return all(c.matches(scores, tags) for c in rule.conditions)
    if isinstance(rule, Disjunction):
        return any(c.matches(scores, tags) for c in rule.conditions)
    return False
