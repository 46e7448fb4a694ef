"""Manual review and maintenance of parsed questions."""

from __future__ import annotations

from typing import List, Optional, Tuple

from .action_log import ActionLog
from .classifier import Classifier
from .constants import (
    COL_QUESTION_ID,
    QUESTION_BANK_TABLE,
    RESULTS_HEADERS,
    RESULTS_TABLE,
)
from .errors import InvalidTransitionError, QuestionNotFoundError
from .extractor import ensure_question_mark
from .images import ImageRegistry
from .logging_utils import get_logger
from .schemas import ActionKind, Question, QuestionStatus
from .storage import TableStore

logger = get_logger(__name__)

TEST_ID_PREFIX = "TEST_"


class QuestionManager:
    """Status changes, edits and review flags on the results table.

    Every change is recorded in the action log with the question ID as the
    subject. Unknown IDs raise QuestionNotFoundError.
    """

    def __init__(
        self,
        store: TableStore,
        action_log: ActionLog,
        images: ImageRegistry,
        classifier: Optional[Classifier] = None,
    ):
        self.store = store
        self.action_log = action_log
        self.images = images
        self.classifier = classifier or Classifier()

    def _locate(self, question_id: str) -> Tuple[int, Question]:
        self.store.create_table(RESULTS_TABLE, RESULTS_HEADERS)
        for index, row in enumerate(self.store.read_all(RESULTS_TABLE)):
            if row and row[COL_QUESTION_ID] == question_id:
                return index, Question.from_row(row)
        raise QuestionNotFoundError(question_id)

    def _save(self, index: int, question: Question) -> None:
        self.store.write_row(RESULTS_TABLE, index, question.to_row())

    def get_question(self, question_id: str) -> Question:
        return self._locate(question_id)[1]

    def questions(self) -> List[Question]:
        self.store.create_table(RESULTS_TABLE, RESULTS_HEADERS)
        return [Question.from_row(row) for row in self.store.read_all(RESULTS_TABLE) if row and row[COL_QUESTION_ID]]

    def pending_questions(self) -> List[Question]:
        return [q for q in self.questions() if q.needs_review]

    def edit_question(self, question_id: str, new_text: str) -> Question:
        index, question = self._locate(question_id)
        old_text = question.text
        question.text = ensure_question_mark(new_text)
        topic = self.classifier.classify_topic(question.text)
        qtype = self.classifier.classify_type(question.text)
        question.topic, question.topic_emoji = topic.topic, topic.emoji
        question.question_type, question.type_emoji = qtype.type, qtype.emoji
        self._save(index, question)
        self._sync_bank_text(question)
        self.action_log.append(ActionKind.EDIT, question_id, f"Changed from: {old_text}")
        return question

    def _sync_bank_text(self, question: Question) -> None:
        if not self.store.has_table(QUESTION_BANK_TABLE):
            return
        for index, row in enumerate(self.store.read_all(QUESTION_BANK_TABLE)):
            if row and row[0] == question.id:
                updated = list(row) + [""] * (6 - len(row))
                updated[1] = question.text
                updated[5] = question.topic
                self.store.write_row(QUESTION_BANK_TABLE, index, updated)

    def remove_question(self, question_id: str) -> Question:
        index, question = self._locate(question_id)
        question.status = QuestionStatus.REMOVED
        self._save(index, question)
        self.action_log.append(ActionKind.REMOVE, question_id, "Question marked as removed")
        return question

    def restore_question(self, question_id: str) -> Question:
        index, question = self._locate(question_id)
        if question.status is not QuestionStatus.REMOVED:
            raise InvalidTransitionError(
                f"Question {question_id} is {question.status.value}; only removed questions can be restored"
            )
        question.status = QuestionStatus.RESTORED
        self._save(index, question)
        self.action_log.append(ActionKind.RESTORE, question_id, "Question restored")
        return question

    def override_topic(self, question_id: str, topic_name: str) -> Question:
        topic = self.classifier.topic_by_name(topic_name)
        if topic is None:
            raise ValueError(f"Unknown topic: {topic_name}")
        index, question = self._locate(question_id)
        previous = question.topic
        question.topic, question.topic_emoji = topic.topic, topic.emoji
        question.needs_review = False
        question.parse_confidence = "100%"
        self._save(index, question)
        self._sync_bank_text(question)
        self.action_log.append(ActionKind.OVERRIDE, question_id, f"Topic {previous} -> {topic.topic}")
        return question

    def flag_for_review(self, question_id: str, reason: str = "") -> Question:
        index, question = self._locate(question_id)
        question.needs_review = True
        self._save(index, question)
        self.action_log.append(ActionKind.REVIEW, question_id, reason or "Flagged for review")
        return question

    def approve_question(self, question_id: str) -> Question:
        index, question = self._locate(question_id)
        question.needs_review = False
        self._save(index, question)
        self.action_log.append(ActionKind.APPROVE, question_id, "Question approved")
        return question

    def cleanup_test_entries(self, prefix: str = TEST_ID_PREFIX) -> int:
        """Delete result rows whose ID starts with ``prefix`` and unlink them from images."""
        self.store.create_table(RESULTS_TABLE, RESULTS_HEADERS)
        rows = self.store.read_all(RESULTS_TABLE)
        kept = [row for row in rows if not (row and row[COL_QUESTION_ID].startswith(prefix))]
        removed = len(rows) - len(kept)
        if removed:
            self.store.clear(RESULTS_TABLE)
            for row in kept:
                self.store.append_row(RESULTS_TABLE, row)
        unlinked = self.images.remove_question_ids(prefix)
        logger.info("Cleanup complete. Removed %d test entries, updated %d images", removed, unlinked)
        return removed
