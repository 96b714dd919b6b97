"""
Quiz session controller for Encard.
Owns the single quiz session and applies the menu/quiz/exit transition rules.
"""
import logging
import time
from typing import Optional

from .config_manager import ConfigManager
from .models import (
    AnswerResult,
    InputEvent,
    MenuChoice,
    QuestionRecord,
    QuizSession,
    SessionState,
    SessionView,
    menu_question,
)
from .question_store import QuestionStore, StoreEmptyError
from .quiz_engine import NavigationCursor, is_correct

logger = logging.getLogger(__name__)

NO_QUESTIONS_NOTICE = "No questions available. Add some with 'encard add'."


def log_state_transition(from_state: SessionState, to_state: SessionState, reason: str = None) -> None:
    """Log a session state transition with structured data."""
    logger.info(
        f"Session: STATE_TRANSITION - {from_state.value} -> {to_state.value}" +
        (f" ({reason})" if reason else ""),
        extra={
            'event_type': 'session_state_transition',
            'from_state': from_state.value,
            'to_state': to_state.value,
            'reason': reason,
            'timestamp': time.time()
        }
    )


def render_view(session: QuizSession) -> SessionView:
    """
    Produce the renderable view of a session.

    Pure function of the session; performs no I/O.
    """
    return SessionView(
        state=session.state,
        prompt=session.current_question.prompt,
        choices=session.current_question.choices,
        highlighted=session.cursor.selected_index,
        score=session.score,
        answered=session.answered,
        elapsed=session.elapsed,
        is_terminal=session.state is SessionState.EXITING,
        notice=session.notice,
        last_result=session.last_result,
    )


class QuizController:
    """
    Orchestrates the quiz session for one run of the program.

    The session starts in the menu, moves to the quiz when Start is chosen
    and a question is available, and ends in the terminal exiting state.
    Every (state, input) pair has exactly one outcome; unrecognized inputs
    leave the session unchanged.
    """

    def __init__(self, question_store: QuestionStore, config_manager: Optional[ConfigManager] = None):
        """
        Initialize the quiz controller.

        Args:
            question_store: Source of question records
            config_manager: Settings provider, defaults are used if None
        """
        self.question_store = question_store
        self.config_manager = config_manager or ConfigManager()

        menu = menu_question(self.config_manager.get_welcome_text())
        self._session = QuizSession(
            current_question=menu,
            cursor=NavigationCursor(menu.choices),
            state=SessionState.MENU,
        )

        logger.info("QuizController initialized")

    @property
    def session(self) -> QuizSession:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def score(self) -> int:
        return self._session.score

    @property
    def answered(self) -> int:
        return self._session.answered

    @property
    def elapsed(self) -> int:
        return self._session.elapsed

    @property
    def current_question(self) -> QuestionRecord:
        return self._session.current_question

    @property
    def cursor(self) -> NavigationCursor:
        return self._session.cursor

    def is_exiting(self) -> bool:
        return self._session.state is SessionState.EXITING

    def handle_input(self, event: InputEvent) -> SessionState:
        """
        Dispatch one input event into the session.

        Args:
            event: The decoded key press

        Returns:
            The session state after the transition

        Raises:
            StorageUnavailableError: If the store cannot be read while fetching a question
            MalformedStorageError: If the store data is corrupt while fetching a question
        """
        state = self._session.state

        if state is SessionState.EXITING:
            return state

        if event is InputEvent.CANCEL:
            self.exit(reason="cancel")
        elif event is InputEvent.MOVE_UP:
            self._session.cursor.move_up()
        elif event is InputEvent.MOVE_DOWN:
            self._session.cursor.move_down()
        elif event is InputEvent.CONFIRM:
            if state is SessionState.MENU:
                self._confirm_menu_choice()
            elif state is SessionState.QUIZ:
                self.submit_answer()

        return self._session.state

    def _confirm_menu_choice(self) -> None:
        choice = MenuChoice(self._session.cursor.selected_index)
        if choice is MenuChoice.START:
            self.start_quiz()
        elif choice is MenuChoice.EXIT:
            self.exit(reason="menu exit")

    def start_quiz(self) -> bool:
        """
        Leave the menu and bind a random question.

        Returns:
            True if the quiz started, False if the store was empty (the
            session stays in the menu with a notice set)
        """
        if self._session.state is not SessionState.MENU:
            logger.warning(f"Cannot start quiz from state {self._session.state.value}")
            return False

        try:
            question = self.question_store.load_random()
        except StoreEmptyError:
            self._session.notice = NO_QUESTIONS_NOTICE
            logger.warning(
                "Start requested but the question store is empty",
                extra={
                    'event_type': 'quiz_start_failed',
                    'reason': 'store_empty',
                    'timestamp': time.time()
                }
            )
            return False

        session = self._session
        session.score = 0
        session.answered = 0
        session.elapsed = 0
        session.notice = None
        session.last_result = None
        self._bind_question(question)
        self._transition(SessionState.QUIZ, reason="start")
        return True

    def submit_answer(self) -> Optional[AnswerResult]:
        """
        Grade the highlighted choice and advance to the next random question.

        Returns:
            The AnswerResult for the submission, or None outside the quiz
        """
        session = self._session
        if session.state is not SessionState.QUIZ:
            return None

        question = session.current_question
        chosen = session.cursor.selected_index
        result = AnswerResult(
            prompt=question.prompt,
            chosen_index=chosen,
            correct_index=question.correct_index,
            correct_choice=question.correct_choice,
        )

        session.answered += 1
        if is_correct(question, chosen):
            session.score += 1
        session.last_result = result

        logger.debug(
            f"Answer submitted: chosen={chosen}, correct={question.correct_index}, score={session.score}",
            extra={
                'event_type': 'answer_submitted',
                'correct': result.correct,
                'score': session.score,
                'answered': session.answered,
                'timestamp': time.time()
            }
        )

        try:
            next_question = self.question_store.load_random()
        except StoreEmptyError:
            self.return_to_menu(notice=NO_QUESTIONS_NOTICE)
            return result

        self._bind_question(next_question)
        return result

    def return_to_menu(self, notice: Optional[str] = None) -> None:
        """Rebind the menu pseudo-question and reset score and elapsed time."""
        session = self._session
        if session.state is SessionState.EXITING:
            return

        previous = session.state
        self._bind_question(menu_question(self.config_manager.get_welcome_text()))
        session.score = 0
        session.answered = 0
        session.elapsed = 0
        session.last_result = None
        session.notice = notice

        if previous is not SessionState.MENU:
            self._transition(SessionState.MENU, reason="return to menu")

    def exit(self, reason: str = None) -> None:
        """Move the session to the terminal exiting state."""
        if self._session.state is SessionState.EXITING:
            return
        self._transition(SessionState.EXITING, reason=reason)

    def tick(self, seconds: int = 1) -> int:
        """
        Advance the elapsed-time counter while a quiz is running.

        Returns:
            The elapsed time after the tick
        """
        if self._session.state is SessionState.QUIZ and seconds > 0:
            self._session.elapsed += seconds
        return self._session.elapsed

    def get_view(self) -> SessionView:
        return render_view(self._session)

    def _bind_question(self, question: QuestionRecord) -> None:
        self._session.current_question = question
        self._session.cursor.rebind(question.choices)

    def _transition(self, to_state: SessionState, reason: str = None) -> None:
        from_state = self._session.state
        self._session.state = to_state
        log_state_transition(from_state, to_state, reason)
