"""
Quiz session

The session is what a host talks to. Every operation commits a state
transition synchronously and returns a signal describing what to show next:

1. RenderQuestion - show the active question
2. RenderResult - show the chosen result
3. RenderNoQuestions - the quiz has no questions configured
4. RenderError - something went wrong; the host shows its own message

Presenting a signal is a separate step (see dispatch()), so a host can delay
it for animations without the engine ever waiting on a timer.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ..config import QuizSettings
from ..errors import RestartDisabledError, SelectionError
from ..quiz.schema import QuizDefinition, QuizQuestion, QuizResult
from ..state import QuizState, StateStore
from ..storage.base import KeyValueStore
from ..storage.memory import MemoryStore
from .resolver import ResultResolver
from .scoring import ScoringAccumulator
from .sequencer import QuestionSequencer

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Why an error state is shown."""
    NO_RESULT = "no_result"
    EMPTY_RESULT = "empty_result"
    TRANSITION = "transition"


@dataclass(frozen=True)
class Progress:
    """Progress display values."""
    current: int
    total: int
    percent: int
    complete: bool = False

    def to_dict(self) -> dict:
        return {
            "current": self.current,
            "total": self.total,
            "percent": self.percent,
            "complete": self.complete,
        }


@dataclass(frozen=True)
class RenderQuestion:
    index: int
    question: QuizQuestion
    progress: Optional[Progress] = None
    can_go_back: bool = False


@dataclass(frozen=True)
class RenderResult:
    result: QuizResult
    scores: dict = field(default_factory=dict)
    tags: tuple = ()
    progress: Optional[Progress] = None
    can_restart: bool = False


@dataclass(frozen=True)
class RenderNoQuestions:
    pass


@dataclass(frozen=True)
class RenderError:
    kind: ErrorKind
    message: str = ""


Signal = Union[RenderQuestion, RenderResult, RenderNoQuestions, RenderError]


class Presenter(ABC):
    """Host-side rendering of session signals."""

    @abstractmethod
    def render_question(self, signal: RenderQuestion) -> None:
        pass

    @abstractmethod
    def render_result(self, signal: RenderResult) -> None:
        pass

    @abstractmethod
    def render_no_questions(self, signal: RenderNoQuestions) -> None:
        pass

    @abstractmethod
    def render_error(self, signal: RenderError) -> None:
        pass


def dispatch(signal: Signal, presenter: Presenter) -> None:
    """Hand a signal to the matching presenter method."""
    if isinstance(signal, RenderQuestion):
        presenter.render_question(signal)
    elif isinstance(signal, RenderResult):
        presenter.render_result(signal)
    elif isinstance(signal, RenderNoQuestions):
        presenter.render_no_questions(signal)
    elif isinstance(signal, RenderError):
        presenter.render_error(signal)
    else:
        raise TypeError(f"Unknown signal: {signal!r}")


class QuizSession:
    """
    One visitor's run through a quiz.

    Coordinates the sequencer, scoring, result resolution and persistence.
    State is saved after every answer and after a restart when persistence
    is enabled; it is never required before rendering.
    """

    def __init__(
        self,
        definition: QuizDefinition,
        session_key: str,
        storage: Optional[KeyValueStore] = None,
        settings: Optional[QuizSettings] = None,
    ):
        """
        Initialize session.

        Args:
            definition: Loaded quiz
            session_key: Storage key for this quiz instance
            storage: Persistence backend (None disables persistence)
            settings: Behavior flags (defaults to environment settings)
        """
        self.definition = definition
        self.session_key = session_key
        self.settings = settings or QuizSettings()

        self.storage = storage
        self.store = StateStore(
            storage if storage is not None else MemoryStore(),
            definition.categories,
            definition.question_count,
        )

        self.state = QuizState.initial(definition.categories, definition.question_count)
        self.sequencer = QuestionSequencer(self.state, definition.question_count)
        self.accumulator = ScoringAccumulator()
        self.resolver = ResultResolver(definition.categories)

    @property
    def persist(self) -> bool:
        return self.settings.persist and self.storage is not None

    @property
    def question_count(self) -> int:
        return self.definition.question_count

    def save(self) -> bool:
        """Persist current state if persistence is on."""
        if not self.persist:
            return False
        return self.store.save(self.session_key, self.state)

    def _replace_state(self, state: QuizState) -> None:
        self.state = state
        self.sequencer.state = state

    def start(self) -> Signal:
        """
        Start or resume the session.

        Returns:
            Signal for the first screen to show
        """
        if self.persist:
            saved = self.store.restore(self.session_key)
            if saved is not None:
                self._replace_state(saved)

        if self.sequencer.is_empty:
            return RenderNoQuestions()

        if self.sequencer.resume():
            return self.show_result()
        return self.current()

    def current(self) -> Signal:
        """Signal for the active question, or the result once complete."""
        if self.sequencer.is_empty:
            return RenderNoQuestions()
        if self.sequencer.is_complete:
            return self.show_result()

        index = self.state.index
        return RenderQuestion(
            index=index,
            question=self.definition.questions[index],
            progress=self.progress(),
            can_go_back=self.sequencer.can_go_back,
        )

    def select(self, option_index: int) -> Signal:
        """
        Answer the active question.

        Any failure is reported as a RenderError; changes applied before
        the failure stay applied.

        Args:
            option_index: Index of the chosen option

        Returns:
            Signal for the next question or the result
        """
        try:
            if self.sequencer.is_complete:
                raise SelectionError("Quiz is already complete")

            index = self.state.index
            options = self.definition.questions[index].options
            if not 0 <= option_index < len(options):
                raise SelectionError(
                    f"Option {option_index} out of range for question {index + 1}"
                )

            self.accumulator.apply(self.state, index, option_index, options[option_index])

            if self.sequencer.advance():
                self.state.completed = True
                self.save()
                return self.show_result()

            self.save()
            return self.current()

        except Exception as e:
            logger.error(f"Quiz: Error selecting option: {e}")
            return RenderError(ErrorKind.TRANSITION, str(e))

    def back(self) -> Signal:
        """Go back one question. Does nothing on the first question."""
        if not self.sequencer.is_complete:
            self.sequencer.back()
        return self.current()

    def restart(self) -> Signal:
        """
        Start over from the first question.

        Raises:
            RestartDisabledError: If restart is turned off for this quiz
        """
        if not self.settings.restart_enabled:
            raise RestartDisabledError("Restart is disabled for this quiz")

        self.store.reset(self.state)
        self.sequencer.restart()
        self.save()
        return self.current()

    def resolve(self) -> Optional[QuizResult]:
        """Resolve the result for the current scores and tags."""
        return self.resolver.resolve(
            self.settings.method,
            self.definition.results,
            self.state.scores,
            self.state.tags,
        )

    def show_result(self) -> Signal:
        """Resolve and describe the result screen."""
        result = self.resolve()
        logger.debug(f"Quiz scores: {self.state.scores}")
        logger.debug(f"Quiz result: {result.id if result else None}")

        if result is None:
            return RenderError(ErrorKind.NO_RESULT, "No matching result. Please check the quiz configuration.")
        if not result.has_content:
            logger.error(f"Quiz: Result has no title or description: {result.id!r}")
            return RenderError(ErrorKind.EMPTY_RESULT, "Result has no content. Please configure it.")

        return RenderResult(
            result=result,
            scores=dict(self.state.scores),
            tags=tuple(self.state.tags),
            progress=self.progress(),
            can_restart=self.settings.restart_enabled,
        )

    def progress(self) -> Optional[Progress]:
        """
        Progress for display.

        While answering, question k of N shows (k-1)/N; the result screen
        shows 100%.

        Returns:
            Progress, or None when progress display is off
        """
        if not self.settings.show_progress:
            return None

        total = self.question_count
        if self.sequencer.is_complete:
            return Progress(current=total, total=total, percent=100, complete=True)

        index = self.state.index
        return Progress(
            current=min(index + 1, total),
            total=total,
            percent=math.floor(index / total * 100 + 0.5) if total else 0,
        )
