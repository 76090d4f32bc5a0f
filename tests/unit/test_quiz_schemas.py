# =============================================================================
# TESTES - Quiz Models
# =============================================================================
# Testes unitarios para documento do quiz e schemas de request/response
# =============================================================================

import pytest
from pydantic import ValidationError


class TestQuizEnums:
    """Testes para enums."""

    def test_difficulty_values(self):
        from quiz.models.enums import QuizDifficulty

        assert [d.value for d in QuizDifficulty] == ["easy", "medium", "hard"]

    def test_open_statuses(self):
        from quiz.models.enums import OPEN_STATUSES, QuizStatus

        assert QuizStatus.COMPLETED not in OPEN_STATUSES
        assert QuizStatus.CANCELLED not in OPEN_STATUSES
        assert QuizStatus.ACTIVE in OPEN_STATUSES


class TestQuestion:
    """Testes para invariantes de Question."""

    def test_defaults(self):
        from quiz.models.document import Question

        q = Question(question="What?", options=["A", "B"], correct_answer=1)

        assert q.points == 1
        assert q.time_limit == 30
        assert q.explanation == ""

    def test_aliases(self):
        """Aceita correctAnswer, correct e timeLimit."""
        from quiz.models.document import Question

        q1 = Question.model_validate({"question": "Q", "options": ["A", "B"], "correctAnswer": 1})
        q2 = Question.model_validate(
            {"question": "Q", "options": ["A", "B"], "correct": 0, "timeLimit": 45}
        )

        assert q1.correct_answer == 1
        assert q2.correct_answer == 0
        assert q2.time_limit == 45

    def test_correct_answer_out_of_bounds(self):
        from quiz.models.document import Question

        with pytest.raises(ValidationError):
            Question(question="Q", options=["A", "B"], correct_answer=2)

    def test_negative_correct_answer(self):
        from quiz.models.document import Question

        with pytest.raises(ValidationError):
            Question(question="Q", options=["A", "B"], correct_answer=-1)

    @pytest.mark.parametrize("options", [["A"], ["A", "B", "C", "D", "E", "F", "G"]])
    def test_option_count_bounds(self, options):
        from quiz.models.document import Question

        with pytest.raises(ValidationError):
            Question(question="Q", options=options, correct_answer=0)

    def test_blank_question_text(self):
        from quiz.models.document import Question

        with pytest.raises(ValidationError):
            Question(question="   ", options=["A", "B"], correct_answer=0)

    def test_blank_option(self):
        from quiz.models.document import Question

        with pytest.raises(ValidationError):
            Question(question="Q", options=["A", " "], correct_answer=0)

    def test_points_must_be_positive(self):
        from quiz.models.document import Question

        with pytest.raises(ValidationError):
            Question(question="Q", options=["A", "B"], correct_answer=0, points=0)


class TestQuizDocument:
    """Testes para invariantes do Quiz."""

    def test_private_requires_access_code(self, example_questions):
        from quiz.models.document import Quiz

        with pytest.raises(ValidationError):
            Quiz(
                title="T",
                topic="X",
                difficulty="easy",
                creator_id="c",
                visibility="private",
                questions=example_questions,
            )

    def test_public_rejects_access_code(self, example_questions):
        from quiz.models.document import Quiz

        with pytest.raises(ValidationError):
            Quiz(
                title="T",
                topic="X",
                difficulty="easy",
                creator_id="c",
                access_code="ABC123",
                questions=example_questions,
            )

    def test_requires_questions(self):
        from quiz.models.document import Quiz

        with pytest.raises(ValidationError):
            Quiz(title="T", topic="X", difficulty="easy", creator_id="c", questions=[])

    def test_title_length(self, example_questions):
        from quiz.models.document import Quiz

        with pytest.raises(ValidationError):
            Quiz(
                title="x" * 101,
                topic="X",
                difficulty="easy",
                creator_id="c",
                questions=example_questions,
            )

    def test_participant_key_mismatch(self, sample_quiz):
        from quiz.models.document import Quiz

        data = sample_quiz.to_dict()
        data["participants"] = {"alice": {"user_id": "bob"}}

        with pytest.raises(ValidationError):
            Quiz.from_dict(data)

    def test_total_points(self, sample_quiz):
        assert sample_quiz.total_points == 4

    def test_add_participant_idempotent(self, sample_quiz):
        assert sample_quiz.add_participant("alice") is True
        assert sample_quiz.add_participant("alice") is False
        assert list(sample_quiz.participants) == ["alice"]

    def test_round_trip_preserves_document(self, private_quiz):
        """to_dict/from_dict preserva campos e tipos."""
        from quiz.models.document import Quiz

        private_quiz.add_participant("alice")
        restored = Quiz.from_dict(private_quiz.to_dict())

        assert restored == private_quiz
        assert restored.access_code == "ABC123"

    def test_reset_attempt(self, sample_quiz):
        from quiz.models.document import AnswerRecord, utcnow

        sample_quiz.add_participant("alice")
        participant = sample_quiz.participants["alice"]
        participant.score = 3
        participant.percentage = 67
        participant.answers = [AnswerRecord(question_index=0, selected_answer=0, is_correct=True)]
        participant.completed_at = utcnow()

        participant.reset_attempt()

        assert participant.score == 0
        assert participant.percentage == 0
        assert participant.answers == []
        assert not participant.is_completed


class TestRequestSchemas:
    """Testes para schemas de request."""

    def test_submit_accepts_camel_case(self):
        from quiz.models.schemas import SubmitAnswersRequest

        body = SubmitAnswersRequest.model_validate(
            {
                "answers": [{"selectedAnswer": 1, "timeSpent": 3}],
                "totalTimeSpent": 12.5,
            }
        )

        assert body.answers[0].selected_answer == 1
        assert body.answers[0].time_spent == 3
        assert body.total_time_spent == 12.5

    def test_create_request_difficulty_enum(self):
        from quiz.models.schemas import CreateQuizRequest

        with pytest.raises(ValidationError):
            CreateQuizRequest(topic="Python", difficulty="impossible")

    def test_create_request_defaults(self):
        from quiz.models.enums import QuizVisibility
        from quiz.models.schemas import CreateQuizRequest

        body = CreateQuizRequest(topic="Python", difficulty="easy")

        assert body.title is None
        assert body.question_count is None
        assert body.visibility == QuizVisibility.PUBLIC
        assert body.settings.allow_retake is True


class TestQuizSummary:
    """Testes para resumo de listagem."""

    def test_access_code_only_for_creator(self, private_quiz):
        from quiz.models.schemas import QuizSummary

        assert QuizSummary.from_quiz(private_quiz, "creator").access_code == "ABC123"
        assert QuizSummary.from_quiz(private_quiz, "alice").access_code is None

    def test_counts(self, sample_quiz):
        from quiz.models.schemas import QuizSummary

        sample_quiz.add_participant("alice")
        summary = QuizSummary.from_quiz(sample_quiz)

        assert summary.question_count == 3
        assert summary.participant_count == 1
        assert summary.total_points == 4
