"""Single-pass transcript parser: lines in, question rows out."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, List, Optional

from .action_log import ActionLog
from .classifier import Classifier
from .config import ParsingConfig
from .constants import (
    COL_QUESTION_ID,
    COL_QUESTION_TEXT,
    QUESTION_BANK_HEADERS,
    QUESTION_BANK_TABLE,
    RESULTS_HEADERS,
    RESULTS_TABLE,
)
from .dedupe import find_similar, is_duplicate
from .errors import ParseAbortedError, QuestionWriteError
from .extractor import extract_questions
from .identifiers import generate_id, pad_number, resolve_admin_code
from .images import ImageRegistry
from .logging_utils import get_logger
from .schemas import ActionKind, LineKind, ParseResult, ParserState, Question, RawQuestionCandidate
from .storage import TableStore
from .tokenizer import classify_line, split_author_header

logger = get_logger(__name__)

FALLBACK_CONFIDENCE = "50%"
MATCHED_CONFIDENCE = "100%"


class QuestionParser:
    """Runs the line state machine and writes each new question through the store."""

    def __init__(
        self,
        store: TableStore,
        action_log: ActionLog,
        images: ImageRegistry,
        classifier: Optional[Classifier] = None,
        settings: Optional[ParsingConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.action_log = action_log
        self.images = images
        self.classifier = classifier or Classifier()
        self.settings = settings or ParsingConfig()
        self.clock = clock or datetime.now

    def setup(self) -> None:
        self.store.create_table(RESULTS_TABLE, RESULTS_HEADERS)
        if self.settings.write_question_bank:
            self.store.create_table(QUESTION_BANK_TABLE, QUESTION_BANK_HEADERS)

    def parse(self, transcript_text: str) -> ParseResult:
        return self.parse_lines((transcript_text or "").splitlines())

    def parse_lines(self, lines: Iterable[str]) -> ParseResult:
        """Parse ``lines`` in order and emit every question not already stored.

        Any store or write failure stops the run with ParseAbortedError; rows
        written before the fault stay in place.
        """
        state = ParserState(current_set=self.settings.default_set)
        result = ParseResult()
        try:
            self.setup()
            for line in lines:
                result.lines_scanned += 1
                self._consume(str(line or "").strip(), state, result)
        except QuestionWriteError as exc:
            self._abort(exc.question_id, str(exc), result, exc)
        except Exception as exc:
            self._abort("SYSTEM", str(exc), result, exc)

        logger.info("Parsing complete: %s", result.summary())
        self.action_log.append(ActionKind.PARSE, "SYSTEM", result.summary())
        return result

    def _abort(self, subject_id: str, reason: str, result: ParseResult, cause: Exception) -> None:
        message = f"Parsing error after {result.emitted_count} questions: {reason}"
        logger.error(message)
        self.action_log.append(ActionKind.ERROR, subject_id, message)
        raise ParseAbortedError(message, result.emitted_count) from cause

    def _consume(self, line: str, state: ParserState, result: ParseResult) -> None:
        kind = classify_line(line)
        if kind in (LineKind.BLANK, LineKind.UNCLASSIFIED):
            return
        logger.debug("Processing line: %s", line)

        if kind is LineKind.AUTHOR_HEADER:
            state.current_author, state.current_date = split_author_header(line)
            logger.debug("Author: %s, Date: %s", state.current_author, state.current_date)
        elif kind is LineKind.SCREENSHOT_URL:
            state.pending_screenshot_url = line
            logger.debug("Screenshot URL found: %s", line)
        elif kind is LineKind.QUESTION_LINE:
            for candidate in extract_questions(line, state):
                self._process_candidate(candidate, state, result)
            state.pending_screenshot_url = ""

    def _existing(self) -> List[List[str]]:
        return [row for row in self.store.read_all(RESULTS_TABLE) if row and row[COL_QUESTION_ID]]

    def _process_candidate(self, candidate: RawQuestionCandidate, state: ParserState, result: ParseResult) -> None:
        admin_code = resolve_admin_code(
            state.current_author,
            self.settings.admin_codes,
            self.settings.fallback_admin_code,
        )
        question_id = generate_id(
            state.current_set,
            state.current_day,
            pad_number(candidate.index, 2),
            admin_code,
        )
        try:
            self._emit(question_id, candidate, state, result)
        except Exception as exc:
            raise QuestionWriteError(question_id, exc) from exc

    def _emit(
        self,
        question_id: str,
        candidate: RawQuestionCandidate,
        state: ParserState,
        result: ParseResult,
    ) -> None:
        existing = self._existing()
        if is_duplicate(question_id, (row[COL_QUESTION_ID] for row in existing)):
            logger.debug("Duplicate question ID detected: %s", question_id)
            result.duplicate_ids.append(question_id)
            return

        question = self._build_question(question_id, candidate, state)
        match = find_similar(
            question.text,
            ((row[COL_QUESTION_ID], row[COL_QUESTION_TEXT]) for row in existing),
            self.settings.similarity_threshold,
        )
        if match is not None:
            question.similar_to = match[0]
            question.needs_review = True

        self._write(question)

        if match is not None:
            logger.info("Question %s is %.0f%% similar to %s", question_id, match[1] * 100, match[0])
            self.action_log.append(
                ActionKind.SIMILAR,
                question_id,
                f"{match[1]:.0%} similar to {match[0]}",
            )

        state.next_row_cursor += 1
        result.emitted_count += 1
        result.questions.append(question)
        logger.debug("Question processed successfully: %s", question_id)

    def _build_question(self, question_id: str, candidate: RawQuestionCandidate, state: ParserState) -> Question:
        topic = self.classifier.classify_topic(candidate.text)
        qtype = self.classifier.classify_type(candidate.text)
        return Question(
            id=question_id,
            text=candidate.text,
            author=state.current_author,
            date=state.current_date,
            day=state.current_day,
            set=state.current_set,
            context=candidate.context,
            screenshot_url=candidate.screenshot_url,
            topic=topic.topic,
            topic_emoji=topic.emoji,
            question_type=qtype.type,
            type_emoji=qtype.emoji,
            parse_confidence=MATCHED_CONFIDENCE if topic.matched else FALLBACK_CONFIDENCE,
            needs_review=not topic.matched,
            is_edited=candidate.is_edited,
        )

    def _write(self, question: Question) -> None:
        self.store.append_row(RESULTS_TABLE, question.to_row())
        if self.settings.write_question_bank:
            self.store.append_row(
                QUESTION_BANK_TABLE,
                question.to_bank_row(self.clock().strftime("%Y-%m-%d")),
            )
        if question.screenshot_url:
            self.images.register_image(question.screenshot_url, question.id)
