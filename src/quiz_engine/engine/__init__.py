"""
Quiz engine

Sequencing, scoring, result resolution and the session that ties them
together.
"""

from .sequencer import QuestionSequencer
from .scoring import ScoringAccumulator, coerce_weight
from .resolver import ResultResolver, Method
from .session import (
    QuizSession,
    Presenter,
    Progress,
    RenderQuestion,
    RenderResult,
    RenderNoQuestions,
    RenderError,
    ErrorKind,
    dispatch,
)

__all__ = [
    "QuestionSequencer",
    "ScoringAccumulator",
    "coerce_weight",
    "ResultResolver",
    "Method",
    "QuizSession",
    "Presenter",
    "Progress",
    "RenderQuestion",
    "RenderResult",
    "RenderNoQuestions",
    "RenderError",
    "ErrorKind",
    "dispatch",
]
