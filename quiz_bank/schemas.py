"""Core data structures shared across modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .constants import DEFAULT_SET


class LineKind(Enum):
    BLANK = "Blank"
    AUTHOR_HEADER = "AuthorHeader"
    SCREENSHOT_URL = "ScreenshotUrl"
    QUESTION_LINE = "QuestionLine"
    UNCLASSIFIED = "Unclassified"


class QuestionStatus(Enum):
    ACTIVE = "Active"
    REMOVED = "Removed"
    RESTORED = "Restored"


class ActionKind(Enum):
    PARSE = "Parse"
    EDIT = "Edit"
    REMOVE = "Remove"
    RESTORE = "Restore"
    OVERRIDE = "Override"
    RESET = "Reset"
    CLEAR = "Clear"
    TEST = "Test"
    ERROR = "Error"
    REVIEW = "Review"
    SIMILAR = "Similar"
    APPROVE = "Approve"


@dataclass(frozen=True)
class TopicResult:
    topic: str
    emoji: str
    matched: bool = True

    @property
    def display(self) -> str:
        return f"{self.emoji} {self.topic}"


@dataclass(frozen=True)
class TypeResult:
    type: str
    emoji: str
    matched: bool = True


@dataclass
class ParserState:
    """Running context carried through one scan of a transcript."""

    current_author: str = ""
    current_date: str = ""
    current_day: str = ""
    current_set: str = DEFAULT_SET
    pending_screenshot_url: str = ""
    next_row_cursor: int = 0


@dataclass
class RawQuestionCandidate:
    """One question pulled out of a question-bearing line, before ID assignment."""

    index: int
    text: str
    context: str = ""
    screenshot_url: str = ""
    has_image: bool = False
    is_edited: bool = False

    @property
    def question_number(self) -> str:
        return f"{self.index:02d}"


@dataclass
class Question:
    """A parsed quiz question as written to the results table."""

    id: str
    text: str
    author: str = ""
    date: str = ""
    day: str = ""
    set: str = DEFAULT_SET
    context: str = ""
    screenshot_url: str = ""
    topic: str = ""
    topic_emoji: str = ""
    question_type: str = ""
    type_emoji: str = ""
    status: QuestionStatus = QuestionStatus.ACTIVE
    parse_confidence: str = "100%"
    needs_review: bool = False
    is_edited: bool = False
    answer_text: str = ""
    similar_to: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.screenshot_url) or bool(self.context)

    def to_row(self) -> List[str]:
        """Render in results-table column order."""
        return [
            self.id,
            self.date,
            self.author,
            self.text,
            self.answer_text,
            self.screenshot_url,
            self.topic_emoji,
            self.topic,
            self.type_emoji,
            self.question_type,
            self.status.value,
            self.parse_confidence,
            "Yes" if self.needs_review else "No",
            self.set,
            f"Day {self.day}" if self.day else "",
        ]

    @classmethod
    def from_row(cls, row: List[str]) -> "Question":
        cells = list(row) + [""] * (15 - len(row))
        day = str(cells[14])
        if day.lower().startswith("day "):
            day = day[4:].strip()
        try:
            status = QuestionStatus(cells[10])
        except ValueError:
            status = QuestionStatus.ACTIVE
        return cls(
            id=str(cells[0]),
            date=str(cells[1]),
            author=str(cells[2]),
            text=str(cells[3]),
            answer_text=str(cells[4]),
            screenshot_url=str(cells[5]),
            topic_emoji=str(cells[6]),
            topic=str(cells[7]),
            type_emoji=str(cells[8]),
            question_type=str(cells[9]),
            status=status,
            parse_confidence=str(cells[11]) or "100%",
            needs_review=str(cells[12]) == "Yes",
            set=str(cells[13]) or DEFAULT_SET,
            day=day,
        )

    def to_bank_row(self, date_added: str) -> List[str]:
        """Render in question-bank column order."""
        return [
            self.id,
            self.text,
            self.context,
            "Yes" if self.has_image else "No",
            self.screenshot_url,
            self.topic,
            self.author,
            date_added,
            "Yes" if self.is_edited else "No",
        ]


@dataclass
class ImageEntry:
    image_id: str
    source_url: str
    file_identity: str
    associated_question_ids: List[str] = field(default_factory=list)
    preview: str = ""
    description: str = ""
    topic_label: str = ""
    date_added: str = ""

    def to_row(self) -> List[str]:
        return [
            self.image_id,
            self.source_url,
            self.preview,
            ", ".join(self.associated_question_ids),
            self.description,
            self.topic_label,
            self.date_added,
        ]


@dataclass
class LogEntry:
    timestamp: Optional[datetime]
    actor_identity: str
    action_kind: str
    subject_id: str
    details: str = ""
    status: str = "Active"


@dataclass
class RollupSnapshot:
    """Aggregates derived from the action log body."""

    today_count: int = 0
    week_count: int = 0
    action_histogram: Dict[str, int] = field(default_factory=dict)
    distinct_admin_count: int = 0


@dataclass
class ParseResult:
    emitted_count: int = 0
    questions: List[Question] = field(default_factory=list)
    duplicate_ids: List[str] = field(default_factory=list)
    lines_scanned: int = 0

    def summary(self) -> str:
        return (
            f"Processed {self.emitted_count} questions "
            f"({len(self.duplicate_ids)} duplicates skipped, {self.lines_scanned} lines scanned)"
        )
