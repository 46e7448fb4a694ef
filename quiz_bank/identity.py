"""Actor identity used to attribute action-log entries."""

from __future__ import annotations

import getpass
from typing import Protocol


class IdentityProvider(Protocol):
    def current_actor_identity(self) -> str:
        ...


class StaticIdentity:
    """Always reports the configured actor."""

    def __init__(self, actor: str):
        self.actor = actor

    def current_actor_identity(self) -> str:
        return self.actor


class SystemIdentity:
    """The login name of the process owner."""

    def current_actor_identity(self) -> str:
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return "unknown"
