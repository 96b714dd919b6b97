"""
Question store for JSON file operations and question record validation.
"""
import json
import logging
import os
import random
import tempfile
import threading
from pathlib import Path
from typing import List, Optional

from .models import QuestionRecord
from .quiz_engine import QuizEngine


class StoreError(Exception):
    """Base exception for question store errors."""
    pass


class StoreEmptyError(StoreError):
    """Raised when a question is requested from a store with no records."""
    pass


class InvalidRecordError(StoreError):
    """Raised when a record fails its invariants on append."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("Invalid question: " + "; ".join(self.problems))


class StorageUnavailableError(StoreError):
    """Raised when the backing directory or file cannot be created or read."""
    pass


class MalformedStorageError(StoreError):
    """Raised when existing backing data does not parse into valid records."""
    pass


class QuestionStore:
    """Manages the durable collection of question records in a JSON file."""

    DEFAULT_FILE_NAME = "questions.json"
    ROOT_KEY = "questions"

    def __init__(self, data_directory, file_name: str = DEFAULT_FILE_NAME,
                 rng: Optional[random.Random] = None):
        """
        Initialize QuestionStore with its storage location.

        Args:
            data_directory: Directory holding the questions file
            file_name: Name of the JSON file inside data_directory
            rng: Random source used for question selection
        """
        self.data_directory = Path(data_directory)
        self.file_path = self.data_directory / file_name
        self.logger = logging.getLogger(__name__)
        self.engine = QuizEngine(rng)
        self._lock = threading.Lock()

    def ensure_storage(self) -> None:
        """
        Create the data directory and an empty questions file if absent.

        Safe to call repeatedly.

        Raises:
            StorageUnavailableError: If the directory or file cannot be created
        """
        try:
            if not self.data_directory.exists():
                self.data_directory.mkdir(parents=True, exist_ok=True)
                self.logger.info(f"Created data directory: {self.data_directory}")

            if not self.file_path.exists():
                self._write_records([])
                self.logger.info(f"Created empty questions file: {self.file_path}")

            if not os.access(self.file_path, os.R_OK):
                raise StorageUnavailableError(
                    f"Permission denied: Cannot read {self.file_path}"
                )
        except PermissionError as e:
            raise StorageUnavailableError(
                f"Permission denied: Cannot access {self.file_path}"
            ) from e
        except OSError as e:
            raise StorageUnavailableError(
                f"System error accessing {self.file_path}: {e}"
            ) from e

    def load_all(self) -> List[QuestionRecord]:
        """
        Load and validate every record in the backing file.

        Returns:
            List of QuestionRecord objects, in file order

        Raises:
            StorageUnavailableError: If the file cannot be created or read
            MalformedStorageError: If the file contents are not valid records
        """
        self.ensure_storage()

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                raw = f.read()
        except PermissionError as e:
            raise StorageUnavailableError(
                f"Permission denied: Cannot read {self.file_path}"
            ) from e
        except UnicodeDecodeError as e:
            self.logger.error(f"Questions file {self.file_path} is not valid UTF-8: {e}")
            raise MalformedStorageError(
                f"Questions file {self.file_path} is not valid UTF-8: {e}"
            ) from e
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to read questions file {self.file_path}: {e}"
            ) from e

        # A zero-length file is an empty store
        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.error(f"Invalid JSON in {self.file_path}: {e}")
            raise MalformedStorageError(f"Invalid JSON in {self.file_path}: {e}") from e

        return self._parse_records(data)

    def _parse_records(self, data) -> List[QuestionRecord]:
        """
        Parse decoded JSON data into validated records.

        Expected structure:
        {
            "questions": [
                {
                    "prompt": str,
                    "choices": [str, ...],
                    "correct_index": int
                }
            ]
        }
        """
        if not isinstance(data, dict):
            raise MalformedStorageError("Questions file must contain a JSON object")

        if self.ROOT_KEY not in data:
            raise MalformedStorageError(f"Questions file must contain a '{self.ROOT_KEY}' key")

        entries = data[self.ROOT_KEY]
        if not isinstance(entries, list):
            raise MalformedStorageError(f"'{self.ROOT_KEY}' value must be an array")

        records = []
        for i, entry in enumerate(entries):
            try:
                record = QuestionRecord.from_dict(entry)
            except KeyError as e:
                raise MalformedStorageError(f"Question {i} missing {e} field") from e
            except TypeError as e:
                raise MalformedStorageError(f"Question {i}: {e}") from e

            problems = record.validation_errors()
            if problems:
                self.logger.error(f"Question {i} in {self.file_path} is invalid: {problems}")
                raise MalformedStorageError(f"Question {i}: " + "; ".join(problems))

            records.append(record)

        return records

    def load_random(self) -> QuestionRecord:
        """
        Select a uniformly random record from the backing file.

        Returns:
            A QuestionRecord

        Raises:
            StoreEmptyError: If the store holds no records
            StorageUnavailableError: If the file cannot be read
            MalformedStorageError: If the file contents are not valid records
        """
        record = self.engine.pick_random(self.load_all())
        if record is None:
            raise StoreEmptyError(f"No questions available in {self.file_path}")
        return record

    def append(self, record: QuestionRecord) -> None:
        """
        Validate a record and append it to the backing file.

        Raises:
            InvalidRecordError: If the record fails its invariants
            StorageUnavailableError: If the file cannot be written
            MalformedStorageError: If the existing data cannot be parsed
        """
        problems = record.validation_errors()
        if problems:
            self.logger.warning(f"Rejected invalid question {record.prompt!r}: {problems}")
            raise InvalidRecordError(problems)

        with self._lock:
            records = self.load_all()
            records.append(record)
            try:
                self._write_records(records)
            except PermissionError as e:
                raise StorageUnavailableError(
                    f"Permission denied: Cannot write {self.file_path}"
                ) from e
            except OSError as e:
                raise StorageUnavailableError(
                    f"Failed to write questions file {self.file_path}: {e}"
                ) from e

        self.logger.info(f"Appended question {record.prompt!r} ({len(records)} total)")

    def count(self) -> int:
        """
        Get the number of stored records.

        Returns:
            Number of records in the backing file
        """
        return len(self.load_all())

    def _write_records(self, records: List[QuestionRecord]) -> None:
        """Replace the backing file atomically with the given records."""
        payload = {self.ROOT_KEY: [record.to_dict() for record in records]}

        fd, tmp_path = tempfile.mkstemp(
            prefix=".questions-", suffix=".tmp", dir=str(self.data_directory)
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, self.file_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
