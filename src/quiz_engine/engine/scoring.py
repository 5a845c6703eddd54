"""
Scoring accumulator

Folds a selected option into the running scores and tags.
"""

import math
from typing import Any

from ..quiz.rules import to_number
from ..quiz.schema import QuizOption
from ..state import QuizState


def coerce_weight(value: Any) -> float:
    """Weights that aren't numbers count as zero."""
    number = to_number(value)
    if isinstance(number, float) and math.isnan(number):
        return 0
    return number


class ScoringAccumulator:
    """
    Applies option selections to a QuizState.

    Re-answering a question adds the new option on top of the old one; the
    earlier contribution is not subtracted.
    """

    def apply(
        self,
        state: QuizState,
        question_index: int,
        option_index: int,
        option: QuizOption,
    ) -> QuizState:
        """
        Record a selection and accumulate its weights and tags.

        Args:
            state: State to update in place
            question_index: Question being answered
            option_index: Index of the chosen option
            option: The chosen option

        Returns:
            The same state
        """
        state.answers[question_index] = option_index

        for category, weight in option.weights.items():
            # Unknown categories are created on demand
            state.scores[category] = state.scores.get(category, 0) + coerce_weight(weight)

        state.tags.extend(option.tags)
        return state
