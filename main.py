#!/usr/bin/env python3
"""
Encard - Main Entry Point

Terminal flashcard quiz. Without a subcommand the interactive quiz starts;
the ``add`` subcommand appends a question to the store.

Usage:
    python main.py
    python main.py add "2+2?" -c 3 -c 4 -a 1
    python main.py list

Configuration:
    Questions and settings live in ~/.encard (questions.json, config.json).
    Use --data-dir or the ENCARD_HOME environment variable to point elsewhere.
"""

import argparse
import logging
import sys

from encard.app import EncardApp
from encard.config_manager import ConfigManager
from encard.models import QuestionRecord
from encard.question_store import (
    InvalidRecordError,
    MalformedStorageError,
    QuestionStore,
    StorageUnavailableError,
)
from encard.quiz_controller import QuizController

logger = logging.getLogger("encard")


class ArgumentParseError(Exception):
    """Raised instead of exiting when the command line cannot be parsed."""

    def __init__(self, message: str, usage: str):
        super().__init__(message)
        self.usage = usage


class EncardArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ArgumentParseError(message, self.format_usage())


def build_arg_parser() -> argparse.ArgumentParser:
    p = EncardArgumentParser(
        prog="encard",
        description="Terminal flashcard quiz",
    )
    p.add_argument("--data-dir", help="Directory holding questions.json (default: ~/.encard)")
    p.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    sub = p.add_subparsers(dest="command", parser_class=EncardArgumentParser)

    sp_add = sub.add_parser("add", help="Add a question to the store")
    sp_add.add_argument("prompt", help="Question text")
    sp_add.add_argument("-c", "--choice", dest="choices", action="append", required=True,
                        help="Answer option (repeat for each choice)")
    sp_add.add_argument("-a", "--answer", type=int, required=True,
                        help="Zero-based index of the correct choice")

    sub.add_parser("list", help="List stored questions")
    return p


def setup_logging_from_config(config_manager: ConfigManager, console: bool = True):
    """
    Set up logging based on configuration.

    The interactive quiz owns the terminal, so it only logs to files.
    """
    log_level = getattr(logging, config_manager.get_log_level())
    log_directory = config_manager.get_log_directory()

    handlers = []
    try:
        log_directory.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_directory / "encard.log", encoding='utf-8'))

        error_handler = logging.FileHandler(log_directory / "errors.log", encoding='utf-8')
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)
    except OSError as e:
        print(f"Warning: cannot write logs to {log_directory}: {e}", file=sys.stderr)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        handlers.append(console_handler)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers or [logging.NullHandler()],
        force=True,
    )


def load_config(args: argparse.Namespace) -> ConfigManager:
    """Build the configuration from defaults, config.json and command-line flags."""
    config_manager = ConfigManager(args.data_dir)
    config_manager.load_config_file()

    if args.log_level:
        result = config_manager.set_log_level(args.log_level)
        if not result['success']:
            print(f"Warning: {result['user_message']}", file=sys.stderr)

    return config_manager


def build_store(config_manager: ConfigManager) -> QuestionStore:
    return QuestionStore(
        config_manager.get_data_directory(),
        file_name=config_manager.get_questions_file(),
    )


def _cmd_add(args: argparse.Namespace, store: QuestionStore) -> int:
    record = QuestionRecord(prompt=args.prompt, choices=tuple(args.choices), correct_index=args.answer)
    try:
        store.append(record)
    except InvalidRecordError as e:
        print("Question not added:", file=sys.stderr)
        for problem in e.problems:
            print(f"  - {problem}", file=sys.stderr)
        return 1

    print(f"Added question: {record.prompt} (answer: {record.correct_choice})")
    return 0


def _cmd_list(args: argparse.Namespace, store: QuestionStore) -> int:
    records = store.load_all()
    if not records:
        print(f"No questions in {store.file_path}")
        return 0

    for number, record in enumerate(records, start=1):
        print(f"{number}. {record.prompt}")
        for i, choice in enumerate(record.choices):
            marker = "*" if i == record.correct_index else " "
            print(f"   {marker} {i}: {choice}")
    return 0


def _cmd_play(config_manager: ConfigManager, store: QuestionStore) -> int:
    store.ensure_storage()
    count = store.count()
    logger.info(f"Starting interactive quiz with {count} questions from {store.file_path}")

    controller = QuizController(store, config_manager)
    app = EncardApp(controller, tick_interval=config_manager.get_tick_interval())
    app.run()

    if app.fatal_error is not None:
        raise app.fatal_error

    logger.info(f"Quiz ended: score {controller.score}/{controller.answered}")
    return 0


def main(argv=None) -> int:
    parser = build_arg_parser()
    try:
        args = parser.parse_args(argv)
    except ArgumentParseError as e:
        print(e.usage + f"encard: error: {e}")
        return 0

    config_manager = load_config(args)
    setup_logging_from_config(config_manager, console=args.command is not None)
    for error in config_manager.load_errors:
        logger.warning(f"Configuration problem: {error}")

    store = build_store(config_manager)

    try:
        if args.command == "add":
            return _cmd_add(args, store)
        if args.command == "list":
            return _cmd_list(args, store)
        return _cmd_play(config_manager, store)
    except StorageUnavailableError as e:
        logger.error(f"Storage unavailable: {e}")
        print(f"Error: question storage is unavailable: {e}", file=sys.stderr)
        return 1
    except MalformedStorageError as e:
        logger.error(f"Malformed storage: {e}")
        print(f"Error: {store.file_path} contains invalid data: {e}", file=sys.stderr)
        print("The file was left unchanged. Fix or remove it and try again.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
