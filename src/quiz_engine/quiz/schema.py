"""
Quiz schema and data structures

Defines questions, options and results, and loads them from the
host-provided configuration. Loading never fails on bad content: invalid
options are dropped, bad rules never match, and every problem is recorded
as a diagnostic.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from ..errors import ConfigurationError
from .categories import CategoryRegistry
from .rules import InvalidRule, Rule, parse_rule

logger = logging.getLogger(__name__)


@dataclass
class QuizOption:
    """A selectable answer."""
    label: str
    weights: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"label": self.label, "weights": dict(self.weights), "tags": list(self.tags)}

    @classmethod
    def from_dict(cls, data: dict) -> "QuizOption":
        weights = data.get("weights")
        tags = data.get("tags")
        return cls(
            label=str(data["label"]),
            weights=dict(weights) if isinstance(weights, dict) else {},
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        )


@dataclass
class QuizQuestion:
    """A single quiz question."""
    position: int
    text: str = ""
    image: Optional[str] = None
    image_alt: Optional[str] = None
    options: list[QuizOption] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = {
            "text": self.text,
            "options": [o.to_dict() for o in self.options],
        }
        if self.image:
            result["image"] = self.image
        if self.image_alt:
            result["image_alt"] = self.image_alt
        return result

    @classmethod
    def from_dict(
        cls,
        data: Any,
        position: int,
        diagnostics: Optional[list[str]] = None,
    ) -> "QuizQuestion":
        """
        Build a question, dropping options that can't be used.

        Args:
            data: Raw question mapping; `options` may be a JSON string
            position: Index of the question in the quiz
            diagnostics: List that configuration problems are appended to

        Returns:
            QuizQuestion with only valid options
        """
        if diagnostics is None:
            diagnostics = []

        if not isinstance(data, dict):
            _report(diagnostics, f"Question {position + 1} has an invalid format: {data!r}")
            data = {}

        raw_options = data.get("options")
        if isinstance(raw_options, str):
            try:
                raw_options = json.loads(raw_options)
            except json.JSONDecodeError:
                _report(diagnostics, f"Question {position + 1} has unparsable options")
                raw_options = []
        if not isinstance(raw_options, list):
            raw_options = []

        options = []
        for raw in raw_options:
            if not isinstance(raw, dict):
                _report(diagnostics, f"Quiz: Invalid option format {raw!r}")
                continue
            if not raw.get("label"):
                _report(diagnostics, f"Quiz: Option missing label {raw!r}")
                continue
            options.append(QuizOption.from_dict(raw))

        if not options:
            _report(diagnostics, f"Question {position + 1} has no options")

        return cls(
            position=position,
            text=str(data.get("text") or ""),
            image=data.get("image") or None,
            image_alt=data.get("image_alt") or None,
            options=options,
        )


@dataclass
class CallToAction:
    """Link shown with a result."""
    label: str
    link: str

    def to_dict(self) -> dict:
        return {"label": self.label, "link": self.link}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["CallToAction"]:
        """Only a CTA with both a label and a link is kept."""
        if not isinstance(data, dict) or not data.get("label") or not data.get("link"):
            return None
        return cls(label=str(data["label"]), link=str(data["link"]))


@dataclass
class QuizResult:
    """A possible outcome of the quiz."""
    id: str
    category_key: Optional[str] = None
    rule: Rule = field(default_factory=InvalidRule)
    title: str = ""
    desc: str = ""
    image: Optional[str] = None
    cta: Optional[CallToAction] = None

    @property
    def has_content(self) -> bool:
        """Whether there is anything to show."""
        return bool(self.title or self.desc)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category_key": self.category_key,
            "title": self.title,
            "desc": self.desc,
            "image": self.image,
            "cta": self.cta.to_dict() if self.cta else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "QuizResult":
        category_key = data.get("category_key")
        return cls(
            id=str(data.get("id") or ""),
            category_key=str(category_key) if category_key else None,
            rule=parse_rule(data.get("rule")),
            title=str(data.get("title") or ""),
            desc=str(data.get("desc") or ""),
            image=data.get("image") or None,
            cta=CallToAction.from_dict(data.get("cta")),
        )


@dataclass
class QuizDefinition:
    """
    A loaded quiz.

    Holds the questions and results together with the category registry
    derived from them and any configuration diagnostics.
    """
    questions: list[QuizQuestion] = field(default_factory=list)
    results: list[QuizResult] = field(default_factory=list)
    categories: CategoryRegistry = field(default_factory=CategoryRegistry)
    diagnostics: list[str] = field(default_factory=list)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def is_empty(self) -> bool:
        """No questions configured."""
        return not self.questions

    def to_dict(self) -> dict:
        return {
            "questions": [q.to_dict() for q in self.questions],
            "results": [r.to_dict() for r in self.results],
            "categories": list(self.categories),
        }


def _report(diagnostics: list[str], message: str) -> None:
    logger.warning(message)
    diagnostics.append(message)


def load_quiz(data: Union[dict, str, None]) -> QuizDefinition:
    """
    Load a quiz from configuration data.

    Args:
        data: Configuration mapping, or its JSON text

    Returns:
        QuizDefinition; an unreadable configuration gives an empty quiz
    """
    diagnostics: list[str] = []

    if isinstance(data, str):
        try:
            data = json.loads(data or "{}")
        except json.JSONDecodeError as e:
            _report(diagnostics, f"Quiz configuration is not valid JSON: {e}")
            data = {}
    if not isinstance(data, dict):
        data = {}

    raw_questions = data.get("questions")
    raw_results = data.get("results")
    if not isinstance(raw_questions, list):
        raw_questions = []
    if not isinstance(raw_results, list):
        raw_results = []

    questions = [
        QuizQuestion.from_dict(q, position, diagnostics)
        for position, q in enumerate(raw_questions)
    ]

    results = []
    for raw in raw_results:
        if not isinstance(raw, dict):
            _report(diagnostics, f"Quiz: Invalid result format {raw!r}")
            continue
        result = QuizResult.from_dict(raw)
        if isinstance(result.rule, InvalidRule) and raw.get("rule"):
            _report(diagnostics, f"Result {result.id!r} has an invalid rule ({result.rule.reason})")
        results.append(result)

    if not questions:
        _report(diagnostics, "No questions configured")

    return QuizDefinition(
        questions=questions,
        results=results,
        categories=CategoryRegistry.discover(questions),
        diagnostics=diagnostics,
    )


def load_quiz_file(path: Union[str, Path]) -> QuizDefinition:
    """
    Load a quiz from a JSON file.

    Raises:
        ConfigurationError: If the file can't be read
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read quiz configuration {path}: {e}") from e
    return load_quiz(text)
