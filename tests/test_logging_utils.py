import logging

from quiz_bank import logging_utils
from quiz_bank.identity import StaticIdentity, SystemIdentity


def test_handler_attached_once():
    logging_utils.configure_logging("DEBUG")
    logging_utils.configure_logging("WARNING")
    root = logging.getLogger()

    attached = [h for h in root.handlers if getattr(h.formatter, "_fmt", None) == logging_utils._FORMAT]
    assert len(attached) == 1
    assert root.level == logging.WARNING
    logging_utils.configure_logging("INFO")


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("QUIZ_BANK_LOG_LEVEL", "debug")
    assert logging_utils._resolve_level() == logging.DEBUG
    assert logging_utils._resolve_level("bogus") == logging.INFO


def test_identities():
    assert StaticIdentity("lois@example.com").current_actor_identity() == "lois@example.com"
    assert SystemIdentity().current_actor_identity()
