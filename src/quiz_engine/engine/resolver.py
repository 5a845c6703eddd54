"""
Result resolver

Picks the outcome for a finished quiz:
1. With the "rules" method, the first result whose rule matches
2. Otherwise (or if no rule matched) the result for the highest category
3. Failing that, the first configured result
"""

import logging
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

from ..quiz.categories import CategoryRegistry
from ..quiz.rules import evaluate
from ..quiz.schema import QuizResult

logger = logging.getLogger(__name__)


class Method(str, Enum):
    """How results are chosen."""
    RULES = "rules"
    HIGHEST_CATEGORY = "highest_category"


class ResultResolver:
    """Resolves a QuizResult from accumulated scores and tags."""

    def __init__(self, registry: CategoryRegistry):
        self.registry = registry

    def resolve(
        self,
        method: str,
        results: Sequence[QuizResult],
        scores: Mapping[str, float],
        tags: Iterable[str],
    ) -> Optional[QuizResult]:
        """
        Resolve the result for a finished quiz.

        Args:
            method: "rules" or "highest_category"; anything else is treated
                as "highest_category"
            results: Configured results, in order
            scores: Accumulated category scores
            tags: Accumulated tags

        Returns:
            The chosen QuizResult, or None if no results are configured
        """
        tags = list(tags)

        if method == Method.RULES.value:
            matched = self.match_rules(results, scores, tags)
            if matched is not None:
                return matched
            logger.debug("No rule matched, falling back to highest category")

        try:
            return self.highest_category(results, scores)
        except Exception as e:
            logger.error(f"Quiz: Error picking result: {e}")
            return results[0] if results else None

    def match_rules(
        self,
        results: Sequence[QuizResult],
        scores: Mapping[str, float],
        tags: Iterable[str],
    ) -> Optional[QuizResult]:
        """First result whose rule evaluates true."""
        tags = list(tags)
        for result in results:
            try:
                if evaluate(result.rule, scores, tags):
                    logger.debug(f"Rule matched for result {result.id!r}")
                    return result
            except Exception as e:
                logger.warning(f"Quiz: Error evaluating rule for result {result.id!r}: {e}")
        return None

    def leading_categories(self, scores: Mapping[str, float]) -> tuple[Optional[str], list[str]]:
        """
        Find the best category and the categories tied with it.

        Scans in registry order. A strictly higher score takes the lead and
        resets the tie set; an equal score joins the tie set only when it
        is above zero, so an all-zero quiz is never a tie.

        Returns:
            Tuple of (best category or None, tie set)
        """
        best_key: Optional[str] = None
        best_value = float("-inf")
        tied: list[str] = []

        for name in self.registry:
            value = scores.get(name, 0) or 0
            if value > best_value:
                best_value = value
                best_key = name
                tied = [name]
            elif value == best_value and value > 0:
                tied.append(name)

        return best_key, tied

    def highest_category(
        self,
        results: Sequence[QuizResult],
        scores: Mapping[str, float],
    ) -> Optional[QuizResult]:
        """Result for the highest-scoring category, with registry-order tie-break."""
        best_key, tied = self.leading_categories(scores)
        by_category = {}
        for result in results:
            if result.category_key is not None:
                by_category.setdefault(result.category_key, result)

        if len(tied) > 1:
            logger.debug(f"Quiz: Multiple categories tied with score {scores.get(best_key)}: {tied}")
            for name in tied:
                if name in by_category:
                    return by_category[name]

        if best_key is not None and best_key in by_category:
            return by_category[best_key]

        return results[0] if results else None
