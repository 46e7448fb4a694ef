"""Screenshot link handling: file identity, sharing, preview formulas."""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urlsplit, urlunsplit

from .logging_utils import get_logger

logger = get_logger(__name__)

DRIVE_FILE_RE = re.compile(r"/d/([^/?#]+)")
DRIVE_QUERY_ID_RE = re.compile(r"[?&]id=([^&#]+)")
THUMBNAIL_URL = "https://drive.google.com/thumbnail?id={file_id}&sz=w200-h200"
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]


def extract_file_identity(url: str) -> str:
    """Stable key for the file behind ``url``.

    Drive links reduce to the file ID whether they use ``/file/d/<id>/view``,
    ``open?id=<id>`` or ``uc?export=view&id=<id>``. Other URLs are keyed on
    scheme, host and path with any query or fragment dropped.
    """
    url = (url or "").strip()
    if "drive.google.com" in url:
        match = DRIVE_FILE_RE.search(url) or DRIVE_QUERY_ID_RE.search(url)
        if match:
            return match.group(1)
    parts = urlsplit(url)
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, "", ""))


def is_drive_file_id(file_identity: str) -> bool:
    """True for a bare Drive file ID, false for URL-keyed identities."""
    return bool(file_identity) and "/" not in file_identity


def build_drive_service(service_account_path: str) -> Any:
    """Drive v3 client authorised with a service account key file."""
    from google.oauth2 import service_account
    from googleapiclient.discovery import build

    creds = service_account.Credentials.from_service_account_file(
        service_account_path, scopes=DRIVE_SCOPES
    )
    return build("drive", "v3", credentials=creds, cache_discovery=False)


class DriveLinkResolver:
    """File/link metadata collaborator for the image registry."""

    def __init__(self, drive_service: Optional[Any] = None):
        self.drive_service = drive_service

    def extract_file_identity(self, url: str) -> str:
        return extract_file_identity(url)

    def ensure_publicly_viewable(self, file_identity: str) -> None:
        """Grant anyone-with-link read access. Skipped when no Drive client is configured."""
        if self.drive_service is None:
            logger.debug("No Drive service configured; leaving sharing for %s unchanged", file_identity)
            return
        if not is_drive_file_id(file_identity):
            logger.debug("Not a Drive file; leaving sharing for %s unchanged", file_identity)
            return
        self.drive_service.permissions().create(
            fileId=file_identity,
            body={"type": "anyone", "role": "reader"},
            fields="id",
        ).execute()
        logger.debug("Updated sharing settings for %s", file_identity)

    def render_preview(self, file_identity: str) -> str:
        if not file_identity:
            raise ValueError("Cannot render a preview without a file identity")
        if is_drive_file_id(file_identity):
            preview_url = THUMBNAIL_URL.format(file_id=file_identity)
        else:
            preview_url = file_identity
        return f'=IMAGE("{preview_url}")'
