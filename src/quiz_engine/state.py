"""
Session state

QuizState holds one visitor's progress. StateStore moves it in and out of a
key-value backend as a single JSON record:

    {"index": 2, "answers": [1, 0, null], "scores": {...}, "tags": [...], "completed": false}
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from .errors import StorageError
from .quiz.categories import CategoryRegistry
from .storage.base import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "quiz-state-"


def session_key_for(quiz_id: str) -> str:
    """Storage key for a quiz instance."""
    return f"{SESSION_KEY_PREFIX}{quiz_id}"


@dataclass
class QuizState:
    """Progress through a quiz."""
    index: int = 0
    answers: list[Optional[int]] = field(default_factory=list)
    scores: dict[str, float] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    completed: bool = False

    @classmethod
    def initial(cls, registry: CategoryRegistry, question_count: int) -> "QuizState":
        """State of a session that hasn't started answering."""
        return cls(
            answers=[None] * question_count,
            scores=registry.initial_scores(),
        )

    def first_unanswered(self) -> int:
        """Position of the first unanswered question, or the count if all are answered."""
        for i, answer in enumerate(self.answers):
            if answer is None:
                return i
        return len(self.answers)

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "answers": list(self.answers),
            "scores": dict(self.scores),
            "tags": list(self.tags),
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict, registry: CategoryRegistry) -> "QuizState":
        """
        Restore state from its record.

        Scores are rebuilt over the registry: missing categories start at
        zero and categories no longer configured are dropped.

        Raises:
            ValueError: If the record doesn't have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError("state record is not an object")
        answers = data.get("answers")
        scores = data.get("scores")
        if not isinstance(answers, list):
            raise ValueError("answers is not a list")
        if not isinstance(scores, dict):
            raise ValueError("scores is not an object")

        tags = data.get("tags")
        index = data.get("index")

        restored = registry.initial_scores()
        for name in registry:
            value = scores.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                restored[name] = value

        return cls(
            index=index if isinstance(index, int) and not isinstance(index, bool) else 0,
            answers=[a if isinstance(a, int) and not isinstance(a, bool) else None for a in answers],
            scores=restored,
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            completed=data.get("completed") is True,
        )


class StateStore:
    """
    Loads and saves QuizState through a key-value backend.

    Persistence is last-writer-wins. Each save writes the whole record in a
    single call so the fields are never seen half-updated.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        registry: CategoryRegistry,
        question_count: int,
    ):
        """
        Initialize store.

        Args:
            storage: Key-value backend
            registry: Categories the scores must cover
            question_count: Number of configured questions
        """
        self.storage = storage
        self.registry = registry
        self.question_count = question_count

    def fresh(self) -> QuizState:
        """A new initial state for this quiz."""
        return QuizState.initial(self.registry, self.question_count)

    def reset(self, state: QuizState) -> QuizState:
        """Reset the values of an existing state in place."""
        state.index = 0
        state.answers = [None] * self.question_count
        state.scores = self.registry.initial_scores()
        state.tags = []
        state.completed = False
        return state

    def read(self, session_key: str) -> Optional[QuizState]:
        """
        Read the persisted state whatever its answer count.

        Returns:
            QuizState, or None if absent, unreadable or malformed
        """
        try:
            raw = self.storage.get(session_key)
        except StorageError as e:
            logger.warning(f"Could not read quiz state {session_key}: {e}")
            return None
        if not raw:
            return None

        try:
            return QuizState.from_dict(json.loads(raw), self.registry)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning(f"Ignoring malformed quiz state {session_key}: {e}")
            return None

    def _matches_quiz(self, state: QuizState) -> bool:
        return len(state.answers) == self.question_count

    def load(self, session_key: str) -> Optional[QuizState]:
        """
        Load the persisted state.

        Returns:
            QuizState, or None if absent, malformed, or saved for a quiz
            with a different number of questions
        """
        state = self.read(session_key)
        if state is not None and not self._matches_quiz(state):
            logger.info(
                f"Quiz state {session_key} has {len(state.answers)} answers "
                f"for {self.question_count} questions; discarding"
            )
            return None
        return state

    def restore(self, session_key: str) -> Optional[QuizState]:
        """
        Load the persisted state for a returning visitor.

        A record saved for a quiz with a different number of questions is
        reset and saved back, so the visitor starts over.

        Returns:
            QuizState, or None if nothing usable was saved
        """
        state = self.read(session_key)
        if state is None:
            return None
        if not self._matches_quiz(state):
            logger.info(f"Quiz {session_key} changed since last visit, starting over")
            self.reset(state)
            self.save(session_key, state)
        return state

    def save(self, session_key: str, state: QuizState) -> bool:
        """
        Persist the state.

        Returns:
            True on success, False if the backend failed
        """
        try:
            self.storage.set(session_key, json.dumps(state.to_dict()))
        except StorageError as e:
            logger.warning(f"Could not save quiz state {session_key}: {e}")
            return False
        return True

    def clear(self, session_key: str) -> bool:
        """Remove the persisted state."""
        try:
            self.storage.remove(session_key)
        except StorageError as e:
            logger.warning(f"Could not clear quiz state {session_key}: {e}")
            return False
        return True
