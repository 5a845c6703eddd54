"""
Question sequencer

Moves the active question index over [0, N]. Index N means every question
has been answered and the result should be shown.
"""

from ..errors import SequenceError
from ..state import QuizState


class QuestionSequencer:
    """State machine over the active question index."""

    def __init__(self, state: QuizState, question_count: int):
        self.state = state
        self.question_count = question_count

    @property
    def index(self) -> int:
        return self.state.index

    @property
    def is_empty(self) -> bool:
        """No questions configured. Not the same as completion."""
        return self.question_count == 0

    @property
    def is_complete(self) -> bool:
        return self.state.index >= self.question_count

    @property
    def can_go_back(self) -> bool:
        return 0 < self.state.index < self.question_count

    def advance(self) -> bool:
        """
        Move to the next question.

        Returns:
            True if the sequence is now complete

        Raises:
            SequenceError: If already past the last question
        """
        if self.state.index >= self.question_count:
            raise SequenceError(
                f"Cannot advance past question {self.question_count}"
            )
        self.state.index += 1
        return self.state.index == self.question_count

    def back(self) -> bool:
        """
        Move to the previous question.

        Returns:
            False (and does nothing) on the first question
        """
        if self.state.index <= 0:
            return False
        self.state.index -= 1
        return True

    def restart(self) -> None:
        self.state.index = 0

    def resume(self) -> bool:
        """
        Settle the index of a restored session.

        The index never points past the first unanswered question. A
        session that ran off the end starts over at the first question,
        unless it was completed with every answer given.

        Returns:
            True if the session should go straight to its result
        """
        first_unanswered = self.state.first_unanswered()
        if self.state.completed and first_unanswered >= self.question_count:
            self.state.index = self.question_count
            return True

        index = min(first_unanswered, max(self.state.index, 0))
        if index >= self.question_count:
            index = 0
        self.state.index = index
        return False
