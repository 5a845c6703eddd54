"""
Category registry

Scoring dimensions are never declared; they are whatever keys option
weights use. Their first-seen order is the only tie-break basis when
picking the highest category, so it is kept explicitly here.
"""

from typing import Iterable, Iterator


class CategoryRegistry:
    """Ordered, immutable set of category names."""

    def __init__(self, names: Iterable[str] = ()):
        ordered: list[str] = []
        seen: set[str] = set()
        for name in names:
            if name not in seen:
                seen.add(name)
                ordered.append(name)
        self._names = tuple(ordered)

    @classmethod
    def discover(cls, questions: Iterable) -> "CategoryRegistry":
        """
        Collect categories from every option's weights.

        Scans question order, then option order, then weight-key order.

        Args:
            questions: Questions whose options carry `weights` mappings

        Returns:
            CategoryRegistry in first-seen order
        """
        return cls(
            key
            for question in questions
            for option in question.options
            for key in option.weights
        )

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def initial_scores(self) -> dict[str, float]:
        """Fresh score mapping with every category at zero."""
        return {name: 0 for name in self._names}

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __repr__(self) -> str:
        return f"CategoryRegistry({list(self._names)!r})"
