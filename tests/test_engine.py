"""
Tests for the sequencer, scoring accumulator and result resolver.
"""

import pytest

from quiz_engine.engine.resolver import Method, ResultResolver
from quiz_engine.engine.scoring import ScoringAccumulator, coerce_weight
from quiz_engine.engine.sequencer import QuestionSequencer
from quiz_engine.errors import SequenceError
from quiz_engine.quiz.categories import CategoryRegistry
from quiz_engine.quiz.rules import parse_rule
from quiz_engine.quiz.schema import QuizOption, QuizResult, load_quiz
from quiz_engine.state import QuizState


def result(id, category_key=None, rule=None):
    return QuizResult(id=id, category_key=category_key, rule=parse_rule(rule), title=id.upper())


class TestQuestionSequencer:
    """Tests for QuestionSequencer."""

    def test_advance_to_end(self):
        """Test advancing signals completion on the last question."""
        seq = QuestionSequencer(QuizState(answers=[None, None]), 2)

        assert seq.advance() is False
        assert seq.advance() is True
        assert seq.is_complete

    def test_advance_past_end(self):
        """Test advancing beyond the end is rejected."""
        seq = QuestionSequencer(QuizState(index=2, answers=[0, 0]), 2)

        with pytest.raises(SequenceError):
            seq.advance()

    def test_back(self):
        """Test going back, and not before the first question."""
        state = QuizState(index=1, answers=[0, None])
        seq = QuestionSequencer(state, 2)

        assert seq.back() is True
        assert state.index == 0
        assert seq.back() is False
        assert state.index == 0

    def test_restart(self):
        """Test restart rewinds to zero."""
        state = QuizState(index=2, answers=[0, 0])
        QuestionSequencer(state, 2).restart()

        assert state.index == 0

    def test_empty(self):
        """Test zero questions is its own condition."""
        seq = QuestionSequencer(QuizState(), 0)

        assert seq.is_empty

    def test_resume_clamps_to_first_unanswered(self):
        """Test resume never skips an unanswered question."""
        state = QuizState(index=3, answers=[0, None, 1, None])

        assert QuestionSequencer(state, 4).resume() is False
        assert state.index == 1

    def test_resume_keeps_earlier_index(self):
        """Test resume keeps a persisted index before the first gap."""
        state = QuizState(index=1, answers=[0, 1, None])

        QuestionSequencer(state, 3).resume()

        assert state.index == 1

    def test_resume_all_answered_not_completed(self):
        """Test a run off the end that wasn't completed starts over."""
        state = QuizState(index=3, answers=[0, 1, 0], completed=False)

        assert QuestionSequencer(state, 3).resume() is False
        assert state.index == 0

    def test_resume_completed(self):
        """Test a completed session goes to its result."""
        state = QuizState(index=3, answers=[0, 1, 0], completed=True)
        seq = QuestionSequencer(state, 3)

        assert seq.resume() is True
        assert seq.is_complete


class TestScoringAccumulator:
    """Tests for ScoringAccumulator."""

    def test_apply(self):
        """Test weights and tags are accumulated."""
        state = QuizState(answers=[None, None], scores={"x": 0, "y": 0})
        option = QuizOption("A", weights={"x": 3, "y": 1}, tags=["vip"])

        ScoringAccumulator().apply(state, 0, 1, option)

        assert state.answers == [1, None]
        assert state.scores == {"x": 3, "y": 1}
        assert state.tags == ["vip"]

    def test_non_numeric_weight(self):
        """Test non-numeric weights add nothing."""
        state = QuizState(answers=[None], scores={"x": 1})

        ScoringAccumulator().apply(state, 0, 0, QuizOption("A", weights={"x": "lots"}))

        assert state.scores == {"x": 1}

    def test_unknown_category_created(self):
        """Test an unregistered category starts at the weight."""
        state = QuizState(answers=[None], scores={"x": 0})

        ScoringAccumulator().apply(state, 0, 0, QuizOption("A", weights={"new": 2}))

        assert state.scores["new"] == 2

    def test_reanswer_accumulates(self):
        """Test re-answering adds on top without subtracting."""
        state = QuizState(answers=[None], scores={"x": 0, "y": 0})
        acc = ScoringAccumulator()

        acc.apply(state, 0, 0, QuizOption("A", weights={"x": 3}, tags=["a"]))
        acc.apply(state, 0, 1, QuizOption("B", weights={"y": 5}, tags=["a"]))

        assert state.answers == [1]
        assert state.scores == {"x": 3, "y": 5}
        assert state.tags == ["a", "a"]

    @pytest.mark.parametrize("value,expected", [
        (2, 2), ("3", 3.0), (None, 0), ("abc", 0), (True, 1), (float("nan"), 0),
    ])
    def test_coerce_weight(self, value, expected):
        """Test weight coercion."""
        assert coerce_weight(value) == expected


class TestResultResolverRules:
    """Tests for rule-based resolution."""

    @pytest.fixture
    def resolver(self):
        return ResultResolver(CategoryRegistry(["x", "y"]))

    def test_first_matching_rule_wins(self, resolver):
        """Test configured order decides between matching rules."""
        results = [
            result("r1", rule={"all": [{"category": "x", "gte": 1}]}),
            result("r2", rule={"any": [{"tags": ["vip"]}]}),
        ]

        chosen = resolver.resolve(Method.RULES, results, {"x": 2, "y": 0}, ["vip"])

        assert chosen.id == "r1"

    def test_later_rule(self, resolver):
        """Test a later rule matches when earlier ones don't."""
        results = [
            result("r1", rule={"all": [{"category": "x", "gte": 10}]}),
            result("r2", rule={"any": [{"tags": ["vip"]}]}),
        ]

        chosen = resolver.resolve("rules", results, {"x": 2, "y": 0}, ["vip"])

        assert chosen.id == "r2"

    def test_no_match_falls_back_to_highest(self, resolver):
        """Test rules fall through to the highest category."""
        results = [
            result("rx", category_key="x", rule={"all": [{"category": "x", "gte": 10}]}),
            result("ry", category_key="y", rule="{broken"),
        ]

        chosen = resolver.resolve("rules", results, {"x": 1, "y": 4}, [])

        assert chosen.id == "ry"

    def test_rules_ignored_for_default_method(self, resolver):
        """Test rules are only used with the rules method."""
        results = [
            result("rx", category_key="x", rule={"all": []}),
            result("ry", category_key="y"),
        ]

        chosen = resolver.resolve("highest_category", results, {"x": 1, "y": 4}, [])

        assert chosen.id == "ry"

    def test_rule_error_is_no_match(self, resolver, monkeypatch):
        """Test an exception in one rule only skips that result."""
        import quiz_engine.engine.resolver as resolver_module

        calls = []

        def flaky(rule, scores, tags):
            calls.append(rule)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return True

        monkeypatch.setattr(resolver_module, "evaluate", flaky)
        results = [result("r1", rule={"all": []}), result("r2", rule={"all": []})]

        assert resolver.resolve("rules", results, {}, []).id == "r2"


class TestResultResolverHighest:
    """Tests for highest-category resolution."""

    def test_concrete_scenario(self):
        """Test picking option B of a single question yields the y result."""
        quiz = load_quiz({
            "questions": [{"text": "Q", "options": [
                {"label": "A", "weights": {"x": 3}},
                {"label": "B", "weights": {"y": 5}},
            ]}],
            "results": [
                {"id": "rx", "category_key": "x", "title": "X"},
                {"id": "ry", "category_key": "y", "title": "Y"},
            ],
        })
        state = QuizState.initial(quiz.categories, 1)
        ScoringAccumulator().apply(state, 0, 1, quiz.questions[0].options[1])

        chosen = ResultResolver(quiz.categories).resolve("highest_category", quiz.results, state.scores, state.tags)

        assert chosen.id == "ry"

    def test_tie_prefers_first_member_with_result(self):
        """Test a three-way tie resolves to the first tied category that has a result."""
        resolver = ResultResolver(CategoryRegistry(["x", "y", "z"]))
        results = [result("ry", category_key="y")]

        chosen = resolver.resolve("highest_category", results, {"x": 5, "y": 5, "z": 5}, [])

        assert chosen.id == "ry"

    def test_tie_uses_registry_order_not_result_order(self):
        """Test tie-break follows registry order."""
        resolver = ResultResolver(CategoryRegistry(["x", "y"]))
        results = [result("ry", category_key="y"), result("rx", category_key="x")]

        chosen = resolver.resolve("highest_category", results, {"x": 2, "y": 2}, [])

        assert chosen.id == "rx"

    def test_higher_score_resets_ties(self):
        """Test a strictly higher score replaces the tie set."""
        resolver = ResultResolver(CategoryRegistry(["x", "y", "z"]))

        best, tied = resolver.leading_categories({"x": 2, "y": 2, "z": 3})

        assert best == "z"
        assert tied == ["z"]

    def test_zero_scores_never_tie(self):
        """Test all-zero scores resolve to the first category."""
        resolver = ResultResolver(CategoryRegistry(["x", "y"]))

        best, tied = resolver.leading_categories({"x": 0, "y": 0})

        assert best == "x"
        assert tied == ["x"]

    def test_zero_scores_without_first_result(self):
        """Test all-zero scores don't consult later categories."""
        resolver = ResultResolver(CategoryRegistry(["x", "y"]))
        results = [result("generic"), result("ry", category_key="y")]

        chosen = resolver.resolve("highest_category", results, {"x": 0, "y": 0}, [])

        assert chosen.id == "generic"

    def test_negative_scores(self):
        """Test the least negative category wins."""
        resolver = ResultResolver(CategoryRegistry(["x", "y"]))
        results = [result("rx", category_key="x"), result("ry", category_key="y")]

        chosen = resolver.resolve("highest_category", results, {"x": -3, "y": -1}, [])

        assert chosen.id == "ry"

    def test_no_result_for_best_category(self):
        """Test fallback to the first configured result."""
        resolver = ResultResolver(CategoryRegistry(["x", "y"]))
        results = [result("first", category_key="other"), result("second")]

        chosen = resolver.resolve("highest_category", results, {"x": 1, "y": 0}, [])

        assert chosen.id == "first"

    def test_no_results(self):
        """Test nothing configured gives None."""
        resolver = ResultResolver(CategoryRegistry(["x"]))

        assert resolver.resolve("highest_category", [], {"x": 1}, []) is None
        assert resolver.resolve("rules", [], {"x": 1}, []) is None

    def test_empty_registry(self):
        """Test a quiz without categories returns the first result."""
        resolver = ResultResolver(CategoryRegistry())
        results = [result("a"), result("b")]

        assert resolver.resolve("highest_category", results, {}, []).id == "a"

    def test_unknown_method_is_highest(self):
        """Test unknown methods behave as highest_category."""
        resolver = ResultResolver(CategoryRegistry(["x", "y"]))
        results = [result("rx", category_key="x", rule={"all": []}), result("ry", category_key="y")]

        assert resolver.resolve("mystery", results, {"x": 0, "y": 2}, []).id == "ry"
