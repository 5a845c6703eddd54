"""
quiz-engine: personality-quiz scoring and result resolution.

Steps a visitor through multiple-choice questions, accumulates weighted
category scores and tags, and picks a result by rules or by top category.
"""

__version__ = "0.1.0"

from .config import config, Config, QuizSettings, StorageSettings
from .errors import (
    QuizError,
    ConfigurationError,
    SequenceError,
    SelectionError,
    RestartDisabledError,
    StorageError,
    StorageAuthenticationError,
)
from .quiz import (
    QuizDefinition,
    QuizQuestion,
    QuizOption,
    QuizResult,
    CategoryRegistry,
    load_quiz,
    load_quiz_file,
    evaluate,
    parse_rule,
)
from .state import QuizState, StateStore, session_key_for
from .engine import (
    QuizSession,
    ResultResolver,
    Method,
    Presenter,
    dispatch,
)
from .storage import get_store

__all__ = [
    # Config
    "config",
    "Config",
    "QuizSettings",
    "StorageSettings",
    # Errors
    "QuizError",
    "ConfigurationError",
    "SequenceError",
    "SelectionError",
    "RestartDisabledError",
    "StorageError",
    "StorageAuthenticationError",
    # Quiz definitions
    "QuizDefinition",
    "QuizQuestion",
    "QuizOption",
    "QuizResult",
    "CategoryRegistry",
    "load_quiz",
    "load_quiz_file",
    "evaluate",
    "parse_rule",
    # State
    "QuizState",
    "StateStore",
    "session_key_for",
    # Engine
    "QuizSession",
    "ResultResolver",
    "Method",
    "Presenter",
    "dispatch",
    # Storage
    "get_store",
]
