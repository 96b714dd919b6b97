"""
Quiz engine core logic for Encard.
Handles choice navigation, answer comparison and random question selection.
"""
import logging
import random
from typing import List, Optional, Sequence

from .models import QuestionRecord

logger = logging.getLogger(__name__)


class NavigationCursor:
    """Tracks the highlighted choice within the active question's choice list."""

    def __init__(self, choices: Sequence[str]):
        """
        Initialize the cursor bound to a choice list.

        Args:
            choices: Non-empty sequence of choice texts

        Raises:
            ValueError: If the choice list is empty
        """
        self._choices: tuple = ()
        self._selected_index = 0
        self.rebind(choices)

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def choice_count(self) -> int:
        return len(self._choices)

    @property
    def choices(self) -> tuple:
        return self._choices

    @property
    def selected_choice(self) -> str:
        return self._choices[self._selected_index]

    def move_up(self) -> None:
        """Highlight the previous choice, wrapping to the last one."""
        n = len(self._choices)
        if n == 0:
            return
        self._selected_index = (self._selected_index - 1 + n) % n

    def move_down(self) -> None:
        """Highlight the next choice, wrapping to the first one."""
        n = len(self._choices)
        if n == 0:
            return
        self._selected_index = (self._selected_index + 1) % n

    def rebind(self, choices: Sequence[str]) -> None:
        """
        Bind a new choice list and reset the highlight to the first choice.

        Raises:
            ValueError: If the choice list is empty
        """
        if not choices:
            raise ValueError("Cannot bind a cursor to an empty choice list")
        self._choices = tuple(choices)
        self._selected_index = 0

    def __repr__(self) -> str:
        return f"NavigationCursor(selected_index={self._selected_index}, choice_count={len(self._choices)})"


def is_correct(question: QuestionRecord, selected_index: int) -> bool:
    """Return True when the selected choice is the question's correct choice."""
    return selected_index == question.correct_index


class QuizEngine:
    """Selects questions for a running quiz."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def pick_random(self, questions: List[QuestionRecord]) -> Optional[QuestionRecord]:
        """
        Pick a uniformly random question.

        Args:
            questions: Candidate questions

        Returns:
            The chosen question, or None if there are no candidates
        """
        if not questions:
            logger.debug("No questions to pick from")
            return None
        return questions[self._rng.randrange(len(questions))]
