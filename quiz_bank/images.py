"""Image registry: one row per underlying screenshot file."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .constants import (
    COL_QUESTION_ID,
    COL_QUESTION_TEXT,
    COL_TOPIC,
    COL_TOPIC_EMOJI,
    IMAGE_HEADERS,
    IMAGE_TABLE,
    IMG_COL_DATE,
    IMG_COL_DESCRIPTION,
    IMG_COL_ID,
    IMG_COL_PREVIEW,
    IMG_COL_QUESTIONS,
    IMG_COL_TOPIC,
    IMG_COL_URL,
    RESULTS_TABLE,
)
from .errors import QuestionNotFoundError
from .identifiers import pad_number
from .links import DriveLinkResolver
from .logging_utils import get_logger
from .schemas import ImageEntry
from .storage import TableStore

logger = get_logger(__name__)

_ID_SPLIT_RE = re.compile(r"[;,]")
_IMAGE_ID_RE = re.compile(r"^IMG_(\d+)$")


def split_question_ids(cell: str) -> List[str]:
    """Parse a comma/semicolon joined ID list, dropping blanks and repeats."""
    out: List[str] = []
    for part in _ID_SPLIT_RE.split(cell or ""):
        qid = part.strip()
        if qid and qid not in out:
            out.append(qid)
    return out


def next_image_id(rows: List[List[str]]) -> str:
    """One past the highest numbered ID in the table."""
    highest = 0
    for row in rows:
        match = _IMAGE_ID_RE.match(row[IMG_COL_ID].strip()) if row else None
        if match:
            highest = max(highest, int(match.group(1)))
    return "IMG_" + pad_number(highest + 1, 3)


class ImageRegistry:
    """Indexes screenshots by file identity and tracks the questions using them."""

    def __init__(
        self,
        store: TableStore,
        resolver: Optional[DriveLinkResolver] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.resolver = resolver or DriveLinkResolver()
        self.clock = clock or datetime.now

    def setup(self) -> None:
        self.store.create_table(IMAGE_TABLE, IMAGE_HEADERS)

    def _row_to_entry(self, row: List[str]) -> ImageEntry:
        cells = list(row) + [""] * (len(IMAGE_HEADERS) - len(row))
        return ImageEntry(
            image_id=cells[IMG_COL_ID],
            source_url=cells[IMG_COL_URL],
            file_identity=self.resolver.extract_file_identity(cells[IMG_COL_URL]),
            associated_question_ids=split_question_ids(cells[IMG_COL_QUESTIONS]),
            preview=cells[IMG_COL_PREVIEW],
            description=cells[IMG_COL_DESCRIPTION],
            topic_label=cells[IMG_COL_TOPIC],
            date_added=cells[IMG_COL_DATE],
        )

    def entries(self) -> List[ImageEntry]:
        self.setup()
        return [self._row_to_entry(row) for row in self.store.read_all(IMAGE_TABLE) if any(row)]

    def register_image(self, url: str, question_id: str) -> None:
        """Attach ``question_id`` to the entry for ``url``'s file, creating it if new.

        Re-registering a known (url, question_id) pair is a no-op. Raises
        QuestionNotFoundError when a new entry's question is not in the
        results table; no row is written in that case.
        """
        if not url or not question_id:
            logger.debug("Skipping image registration with missing url or question id")
            return
        self.setup()
        file_identity = self.resolver.extract_file_identity(url)
        rows = self.store.read_all(IMAGE_TABLE)

        for index, row in enumerate(rows):
            if not any(row):
                continue
            entry = self._row_to_entry(row)
            if entry.file_identity != file_identity:
                continue
            if question_id in entry.associated_question_ids:
                logger.debug("Question %s already linked to image %s", question_id, entry.image_id)
                return
            entry.associated_question_ids.append(question_id)
            self._write_question_ids(index, entry)
            logger.debug("Linked %s to existing image %s", question_id, entry.image_id)
            return

        details = self._question_details(question_id)
        entry = ImageEntry(
            image_id=next_image_id(rows),
            source_url=url.strip(),
            file_identity=file_identity,
            associated_question_ids=[question_id],
            preview=self._preview(file_identity),
            description=details["description"],
            topic_label=f"{details['topic_emoji']} {details['topic']}".strip(),
            date_added=self.clock().strftime("%Y-%m-%d"),
        )
        self.store.append_row(IMAGE_TABLE, entry.to_row())
        logger.info("Added image %s for question %s", entry.image_id, question_id)

    def _question_details(self, question_id: str) -> Dict[str, str]:
        rows = self.store.read_all(RESULTS_TABLE) if self.store.has_table(RESULTS_TABLE) else []
        for row in rows:
            if row and row[COL_QUESTION_ID] == question_id:
                topic = row[COL_TOPIC]
                text = row[COL_QUESTION_TEXT]
                return {
                    "topic": topic,
                    "topic_emoji": row[COL_TOPIC_EMOJI],
                    "question_text": text,
                    "description": f"Image for {topic} question: {text[:100]}...",
                }
        raise QuestionNotFoundError(question_id)

    def _write_question_ids(self, index: int, entry: ImageEntry) -> None:
        self.store.write_cell(IMAGE_TABLE, index, IMG_COL_QUESTIONS, ", ".join(entry.associated_question_ids))

    def _preview(self, file_identity: str, share: bool = True) -> str:
        try:
            if share:
                self.resolver.ensure_publicly_viewable(file_identity)
            return self.resolver.render_preview(file_identity)
        except Exception as exc:
            logger.warning("Preview error for %s: %s", file_identity, exc)
            return f"Preview Error: {exc}"

    def cleanup_duplicates(self) -> int:
        """Merge rows sharing a file identity into the first one; return rows removed."""
        self.setup()
        merged: Dict[str, ImageEntry] = {}
        order: List[str] = []
        removed = 0
        for row in self.store.read_all(IMAGE_TABLE):
            if not any(row):
                continue
            entry = self._row_to_entry(row)
            kept = merged.get(entry.file_identity)
            if kept is None:
                merged[entry.file_identity] = entry
                order.append(entry.file_identity)
                continue
            for qid in entry.associated_question_ids:
                if qid not in kept.associated_question_ids:
                    kept.associated_question_ids.append(qid)
            removed += 1
        if removed:
            self.store.clear(IMAGE_TABLE)
            for identity in order:
                entry = merged[identity]
                if not entry.preview:
                    # Formula cells read back blank on the Sheets backend.
                    entry.preview = self._preview(identity, share=False)
                self.store.append_row(IMAGE_TABLE, entry.to_row())
            logger.info("Removed %d duplicate image entries", removed)
        return removed

    def remove_question_ids(self, prefix: str) -> int:
        """Drop associated IDs starting with ``prefix``; return rows updated."""
        self.setup()
        updated = 0
        for index, row in enumerate(self.store.read_all(IMAGE_TABLE)):
            if not any(row):
                continue
            entry = self._row_to_entry(row)
            kept = [qid for qid in entry.associated_question_ids if not qid.startswith(prefix)]
            if kept != entry.associated_question_ids:
                entry.associated_question_ids = kept
                self._write_question_ids(index, entry)
                updated += 1
        return updated
