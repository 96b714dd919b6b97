"""
Terminal event loop for Encard.

Renders the session view in a centered card and feeds key presses into the
quiz controller. Run through main.py or the ``encard`` console script.
"""
import logging
from typing import Optional

from rich.markup import escape
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, Header, Static

from .models import InputEvent, SessionState, SessionView
from .question_store import StoreError
from .quiz_controller import QuizController

logger = logging.getLogger(__name__)

KEY_EVENTS = {
    "up": InputEvent.MOVE_UP,
    "down": InputEvent.MOVE_DOWN,
    "enter": InputEvent.CONFIRM,
    "escape": InputEvent.CANCEL,
}


def input_event_for_key(key: str) -> InputEvent:
    """Translate a textual key name into an input event."""
    return KEY_EVENTS.get(key, InputEvent.OTHER)


def format_elapsed(seconds: int) -> str:
    minutes, secs = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{secs:02d}"


def format_status(view: SessionView) -> str:
    if view.state is not SessionState.QUIZ:
        return ""
    return (f"Score: [bold]{view.score}[/bold]/{view.answered}"
            f"    Time: {format_elapsed(view.elapsed)}")


def format_choices(view: SessionView) -> str:
    lines = []
    for i, choice in enumerate(view.choices):
        if i == view.highlighted:
            lines.append(f"[reverse] > {escape(choice)} [/reverse]")
        else:
            lines.append(f"   {escape(choice)}")
    return "\n".join(lines)


def format_feedback(view: SessionView) -> str:
    """Describe the last answer, or the pending notice in the menu."""
    if view.notice:
        return f"[yellow]{escape(view.notice)}[/yellow]"
    result = view.last_result
    if result is None:
        return ""
    if result.correct:
        return "[green]Correct![/green]"
    return f"[red]Wrong.[/red] The answer was: {escape(result.correct_choice)}"


class EncardApp(App):
    """Interactive flashcard quiz."""

    TITLE = "Encard"

    CSS = """
    Screen { align: center middle; }

    #card {
        width: 60%;
        height: auto;
        border: round $primary;
        padding: 1 2;
    }
    #status   { color: $text-muted; height: 1; }
    #prompt   { text-style: bold; padding: 1 0; }
    #choices  { padding: 0 0 1 0; }
    #feedback { min-height: 1; }
    """

    BINDINGS = [
        Binding("up", "move_up", "Up", priority=True),
        Binding("down", "move_down", "Down", priority=True),
        Binding("enter", "confirm", "Select", priority=True),
        Binding("escape", "cancel", "Quit", priority=True),
    ]

    def __init__(self, controller: QuizController, tick_interval: float = 1.0) -> None:
        super().__init__()
        self.controller = controller
        self.tick_interval = tick_interval
        self.fatal_error: Optional[StoreError] = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="card"):
            yield Static(id="status")
            yield Static(id="prompt")
            yield Static(id="choices")
            yield Static(id="feedback")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_view()
        self.set_interval(self.tick_interval, self._advance_clock)

    def _advance_clock(self) -> None:
        if self.controller.state is SessionState.QUIZ:
            self.controller.tick()
            self.query_one("#status", Static).update(format_status(self.controller.get_view()))

    def refresh_view(self) -> None:
        view = self.controller.get_view()
        self.query_one("#status", Static).update(format_status(view))
        self.query_one("#prompt", Static).update(escape(view.prompt))
        self.query_one("#choices", Static).update(format_choices(view))
        self.query_one("#feedback", Static).update(format_feedback(view))

    def dispatch_input(self, event: InputEvent) -> None:
        """Feed one input event to the controller, then re-render or stop."""
        try:
            self.controller.handle_input(event)
        except StoreError as e:
            logger.error(f"Fatal store error during play: {e}")
            self.fatal_error = e
            self.exit()
            return

        if self.controller.get_view().is_terminal:
            self.exit()
            return
        self.refresh_view()

    def action_move_up(self) -> None:
        self.dispatch_input(InputEvent.MOVE_UP)

    def action_move_down(self) -> None:
        self.dispatch_input(InputEvent.MOVE_DOWN)

    def action_confirm(self) -> None:
        self.dispatch_input(InputEvent.CONFIRM)

    def action_cancel(self) -> None:
        self.dispatch_input(InputEvent.CANCEL)

    def on_key(self, event: events.Key) -> None:
        # Bound keys never reach here; everything else is a no-op input
        self.dispatch_input(input_event_for_key(event.key))
