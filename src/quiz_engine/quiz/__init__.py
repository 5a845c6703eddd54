"""
Quiz definitions for quiz-engine

Questions, options, results, the category registry and result rules.
"""

from .schema import (
    QuizOption,
    QuizQuestion,
    QuizResult,
    CallToAction,
    QuizDefinition,
    load_quiz,
    load_quiz_file,
)
from .categories import CategoryRegistry
from .rules import (
    CategoryBound,
    TagMembership,
    Conjunction,
    Disjunction,
    InvalidRule,
    parse_rule,
    parse_condition,
    evaluate,
)

__all__ = [
    "QuizOption",
    "QuizQuestion",
    "QuizResult",
    "CallToAction",
    "QuizDefinition",
    "load_quiz",
    "load_quiz_file",
    "CategoryRegistry",
    "CategoryBound",
    "TagMembership",
    "Conjunction",
    "Disjunction",
    "InvalidRule",
    "parse_rule",
    "parse_condition",
    "evaluate",
]
