"""Test result value object."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID


@dataclass
class TestResult:
    """Scores of a completed session.

    ``scores`` is indexed by category id; index 0 is reserved and stays 0.
    """

    __test__ = False

    session_id: UUID
    user_id: int
    user_name: str
    started_at: datetime
    completed_at: datetime
    category_id: int
    scores: Tuple[int, ...]
    shareable_card: Optional[bytes] = None
    card_generated_at: Optional[datetime] = None

    @property
    def total_score(self) -> int:
        return sum(self.scores)

    @property
    def max_score(self) -> int:
        return max(self.scores) if self.scores else 0

    @property
    def has_shareable_card(self) -> bool:
        return self.shareable_card is not None

    def score_for(self, category_id: int) -> int:
        """Score of a category, 0 for ids outside the score vector."""
        if 0 < category_id < len(self.scores):
            return self.scores[category_id]
        return 0

    def set_shareable_card(self, card: bytes, generated_at: datetime) -> None:
        """Attach a generated share card."""
        self.shareable_card = card
        self.card_generated_at = generated_at
