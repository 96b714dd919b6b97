"""
Core data models for the Encard flashcard quiz.
"""
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from .quiz_engine import NavigationCursor


DEFAULT_WELCOME_TEXT = "Welcome to Encard"
MENU_CHOICES = ("Start", "Exit")


class SessionState(Enum):
    """Enumeration of possible quiz session states."""
    MENU = "menu"
    QUIZ = "quiz"
    EXITING = "exiting"


class InputEvent(Enum):
    """Discrete input events fed into the session by the event loop."""
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    OTHER = "other"


class MenuChoice(Enum):
    """Options offered by the menu pseudo-question, in display order."""
    START = 0
    EXIT = 1


@dataclass(frozen=True)
class QuestionRecord:
    """Represents a single multiple-choice question."""
    prompt: str
    choices: Tuple[str, ...]
    correct_index: int

    def __post_init__(self):
        # Lists passed in by callers are frozen into tuples
        if isinstance(self.choices, list):
            object.__setattr__(self, "choices", tuple(self.choices))

    @property
    def correct_choice(self) -> str:
        return self.choices[self.correct_index]

    def validation_errors(self) -> List[str]:
        """
        Check the record against its invariants.

        Returns:
            List of human-readable problems, empty when the record is valid
        """
        errors = []

        if not isinstance(self.prompt, str) or not self.prompt.strip():
            errors.append("prompt must be a non-empty string")

        if not isinstance(self.choices, tuple):
            errors.append("choices must be a list of strings")
            return errors

        if not self.choices:
            errors.append("at least one choice is required")

        for i, choice in enumerate(self.choices):
            if not isinstance(choice, str):
                errors.append(f"choice {i} must be a string")
            elif not choice.strip():
                errors.append(f"choice {i} must not be empty")

        # bool is a subclass of int but never a meaningful index
        if isinstance(self.correct_index, bool) or not isinstance(self.correct_index, int):
            errors.append("correct_index must be an integer")
        elif self.choices and not 0 <= self.correct_index < len(self.choices):
            errors.append(
                f"correct_index {self.correct_index} is out of range "
                f"for {len(self.choices)} choices"
            )

        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "choices": list(self.choices),
            "correct_index": self.correct_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuestionRecord":
        """
        Build a record from its persisted form.

        Args:
            data: Mapping with prompt, choices and correct_index keys

        Raises:
            KeyError: If a required field is missing
            TypeError: If the data is not a mapping or choices is not a list
        """
        if not isinstance(data, dict):
            raise TypeError("question record must be a JSON object")

        choices = data["choices"]
        if not isinstance(choices, list):
            raise TypeError("'choices' field must be an array")

        return cls(
            prompt=data["prompt"],
            choices=tuple(choices),
            correct_index=data["correct_index"],
        )


def menu_question(welcome_text: str = DEFAULT_WELCOME_TEXT) -> QuestionRecord:
    """Build the synthetic pseudo-question shown while in the menu."""
    return QuestionRecord(prompt=welcome_text, choices=MENU_CHOICES, correct_index=0)


@dataclass(frozen=True)
class AnswerResult:
    """Outcome of the most recent answer submission."""
    prompt: str
    chosen_index: int
    correct_index: int
    correct_choice: str

    @property
    def correct(self) -> bool:
        return self.chosen_index == self.correct_index


@dataclass
class QuizSession:
    """The in-memory quiz state for one run of the program."""
    current_question: QuestionRecord
    cursor: "NavigationCursor"
    state: SessionState
    score: int = 0
    answered: int = 0
    elapsed: int = 0
    notice: Optional[str] = None
    last_result: Optional[AnswerResult] = None


@dataclass(frozen=True)
class SessionView:
    """Renderable snapshot of a session, consumed by the event loop."""
    state: SessionState
    prompt: str
    choices: Tuple[str, ...]
    highlighted: int
    score: int
    answered: int
    elapsed: int
    is_terminal: bool
    notice: Optional[str] = None
    last_result: Optional[AnswerResult] = None
