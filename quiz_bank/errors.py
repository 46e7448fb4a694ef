"""Exception types raised by the quiz_bank pipeline."""

from __future__ import annotations


class QuizBankError(Exception):
    """Base class for all pipeline errors."""


class StoreError(QuizBankError):
    """The tabular store could not complete a read or write."""


class TableNotFoundError(StoreError):
    def __init__(self, table_name: str):
        super().__init__(f'Table "{table_name}" not found')
        self.table_name = table_name


class QuestionWriteError(QuizBankError):
    """Writing a single question failed; aborts the surrounding parse run."""

    def __init__(self, question_id: str, cause: Exception):
        super().__init__(f"Failed to process question {question_id}: {cause}")
        self.question_id = question_id
        self.cause = cause


class ParseAbortedError(QuizBankError):
    """A parse run stopped early. Questions emitted before the fault are kept."""

    def __init__(self, message: str, emitted_count: int):
        super().__init__(message)
        self.emitted_count = emitted_count


class QuestionNotFoundError(QuizBankError, LookupError):
    def __init__(self, question_id: str):
        super().__init__(f"Question details not found for ID: {question_id}")
        self.question_id = question_id


class InvalidTransitionError(QuizBankError):
    """A status change is not allowed from the question's current status."""
