"""Orchestration layer wiring the store, parser, image registry and action log."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, List, Optional

from .action_log import ActionLog
from .admin import QuestionManager
from .classifier import Classifier
from .config import AppConfig
from .constants import (
    IMAGE_TABLE,
    QUESTION_BANK_TABLE,
    RAW_DATA_HEADERS,
    RAW_DATA_TABLE,
    RESULTS_TABLE,
)
from .identity import IdentityProvider, StaticIdentity, SystemIdentity
from .images import ImageRegistry
from .links import DriveLinkResolver, build_drive_service
from .logging_utils import configure_logging, get_logger
from .parser import QuestionParser
from .schemas import ActionKind, ParseResult
from .storage import TableStore, build_store

logger = get_logger(__name__)


class QuizBankPipeline:
    """High-level entry point; one lock serialises every write path."""

    def __init__(
        self,
        config: AppConfig,
        store: Optional[TableStore] = None,
        identity: Optional[IdentityProvider] = None,
        links: Optional[DriveLinkResolver] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        configure_logging(config.logging.level)
        self.store = store if store is not None else build_store(config)
        if identity is None:
            identity = StaticIdentity(config.action_log.actor) if config.action_log.actor else SystemIdentity()
        if links is None:
            links = self._default_links(config)
        self._lock = threading.RLock()

        self.classifier = Classifier()
        self.action_log = ActionLog(
            self.store,
            identity=identity,
            reserved_rows=config.action_log.reserved_rows,
            clock=clock,
        )
        self.images = ImageRegistry(self.store, links, clock=clock)
        self.parser = QuestionParser(
            self.store,
            self.action_log,
            self.images,
            classifier=self.classifier,
            settings=config.parsing,
            clock=clock,
        )
        self.manager = QuestionManager(self.store, self.action_log, self.images, classifier=self.classifier)

    @staticmethod
    def _default_links(config: AppConfig) -> DriveLinkResolver:
        if config.sheets.manage_sharing and config.sheets.service_account_path:
            return DriveLinkResolver(build_drive_service(config.sheets.service_account_path))
        return DriveLinkResolver()

    def setup(self) -> None:
        """Create every table with its header row. Safe to repeat."""
        with self._lock:
            self.store.create_table(RAW_DATA_TABLE, RAW_DATA_HEADERS)
            self.parser.setup()
            self.images.setup()
            self.action_log.setup()

    def load_raw_data(self, transcript_text: str) -> int:
        """Append each transcript line to the raw data table; return lines stored."""
        with self._lock:
            self.setup()
            lines = (transcript_text or "").splitlines()
            for line in lines:
                self.store.append_row(RAW_DATA_TABLE, [line])
            logger.info("Loaded %d raw lines", len(lines))
            return len(lines)

    def parse(self, transcript_text: str) -> ParseResult:
        with self._lock:
            self.setup()
            return self.parser.parse(transcript_text)

    def parse_raw_data(self) -> ParseResult:
        with self._lock:
            self.setup()
            lines = [row[0] if row else "" for row in self.store.read_all(RAW_DATA_TABLE)]
            return self.parser.parse_lines(lines)

    def register_image(self, url: str, question_id: str) -> None:
        with self._lock:
            self.setup()
            self.images.register_image(url, question_id)

    def reset_all(self) -> None:
        """Clear data tables but keep the action log."""
        with self._lock:
            self.setup()
            self.action_log.append(ActionKind.RESET, "SYSTEM", "Starting system reset (preserving Admin Log)")
            for table in (RAW_DATA_TABLE, RESULTS_TABLE, QUESTION_BANK_TABLE, IMAGE_TABLE):
                if self.store.has_table(table):
                    self.store.clear(table)
            self.action_log.append(ActionKind.RESET, "SYSTEM", "System reset completed (Admin Log preserved)")
            logger.info("Reset complete")

    def cleanup_test_entries(self) -> int:
        with self._lock:
            return self.manager.cleanup_test_entries()

    def cleanup_duplicate_images(self) -> int:
        with self._lock:
            return self.images.cleanup_duplicates()

    def edit_question(self, question_id: str, new_text: str):
        with self._lock:
            return self.manager.edit_question(question_id, new_text)

    def remove_question(self, question_id: str):
        with self._lock:
            return self.manager.remove_question(question_id)

    def restore_question(self, question_id: str):
        with self._lock:
            return self.manager.restore_question(question_id)

    def override_topic(self, question_id: str, topic_name: str):
        with self._lock:
            return self.manager.override_topic(question_id, topic_name)

    def flag_for_review(self, question_id: str, reason: str = ""):
        with self._lock:
            return self.manager.flag_for_review(question_id, reason)

    def approve_question(self, question_id: str):
        with self._lock:
            return self.manager.approve_question(question_id)

    def pending_questions(self) -> List:
        return self.manager.pending_questions()
