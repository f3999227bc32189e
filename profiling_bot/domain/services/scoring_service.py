"""Score aggregation and personality type classification."""

from typing import Dict, List, Sequence

from ..entities import PersonalityType, Question, TestResult, TestSession
from ..exceptions import ConfigurationError, InvalidAnswerError, SessionNotCompletedError


class ScoringService:
    """Domain service turning a completed session into a TestResult."""

    def calculate_result(
        self,
        session: TestSession,
        questions: Sequence[Question],
        categories: Sequence[PersonalityType]
    ) -> TestResult:
        """Score a completed session and stamp its result fields."""

        if not session.is_completed:
            raise SessionNotCompletedError(session.id)

        scores = self.calculate_scores(session, questions, categories)
        category_id = self.determine_category(scores, categories)

        category = next(c for c in categories if c.id == category_id)
        session.set_result(category.id, category.name)

        return TestResult(
            session_id=session.id,
            user_id=session.user_id,
            user_name=session.user_name,
            started_at=session.started_at,
            completed_at=session.completed_at,
            category_id=category_id,
            scores=tuple(scores)
        )

    def calculate_scores(
        self,
        session: TestSession,
        questions: Sequence[Question],
        categories: Sequence[PersonalityType]
    ) -> List[int]:
        """Count answers per category; index 0 of the result is unused."""

        if not categories:
            raise ConfigurationError("no personality types configured")

        questions_by_id: Dict[int, Question] = {q.id: q for q in questions}
        scores = [0] * (max(c.id for c in categories) + 1)

        for question_id, answer_id in session.answers.items():
            question = questions_by_id.get(question_id)
            answer = question.get_answer(answer_id) if question else None
            if answer is None:
                raise InvalidAnswerError(question_id, answer_id)
            scores[answer.category_id] += 1

        return scores

    def determine_category(
        self,
        scores: Sequence[int],
        categories: Sequence[PersonalityType]
    ) -> int:
        """Pick the highest scoring category; the lowest id wins ties."""

        ordered = sorted(categories, key=lambda c: c.id)
        if not ordered:
            raise ConfigurationError("no personality types configured")

        max_score = -1
        category_id = -1

        for category in ordered:
            score = scores[category.id]
            if score > max_score:
                max_score = score
                category_id = category.id

        if category_id == -1:
            category_id = ordered[0].id

        return category_id
