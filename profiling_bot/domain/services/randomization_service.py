"""Per-session question and answer shuffling."""

import random
from typing import Optional, Sequence

from ..entities import Question, SessionOrders
from ..exceptions import ConfigurationError


def _permutation(items: Sequence[int], rng: random.Random) -> tuple:
    return tuple(rng.sample(list(items), len(items)))


def generate_orders(
    questions: Sequence[Question],
    rng: Optional[random.Random] = None
) -> SessionOrders:
    """Generate a random question order and a random answer order per question.

    Every call draws a new permutation; pass a seeded ``random.Random`` to
    make the result reproducible.
    """

    if not questions:
        raise ConfigurationError("no questions configured")

    for question in questions:
        if not question.answers:
            raise ConfigurationError("question without answers", f"question {question.id}")

    if rng is None:
        rng = random.Random()

    question_order = _permutation([question.id for question in questions], rng)
    answer_order = {
        question.id: _permutation(question.answer_ids, rng)
        for question in questions
    }

    return SessionOrders(question_order=question_order, answer_order=answer_order)
