"""Shared fixtures: in-memory store, fixed clock, static identity, wired pipeline."""

from __future__ import annotations

from datetime import datetime

import pytest

from quiz_bank.action_log import ActionLog
from quiz_bank.config import AppConfig
from quiz_bank.identity import StaticIdentity
from quiz_bank.images import ImageRegistry
from quiz_bank.links import DriveLinkResolver
from quiz_bank.pipeline import QuizBankPipeline
from quiz_bank.storage import InMemoryTableStore

FIXED_NOW = datetime(2024, 3, 5, 10, 30, 0)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store():
    return InMemoryTableStore()


@pytest.fixture
def identity():
    return StaticIdentity("lois@example.com")


@pytest.fixture
def action_log(store, identity, clock):
    log = ActionLog(store, identity=identity, clock=clock)
    log.setup()
    return log


@pytest.fixture
def images(store, clock):
    registry = ImageRegistry(store, DriveLinkResolver(), clock=clock)
    registry.setup()
    return registry


@pytest.fixture
def config():
    return AppConfig.from_dict({"storage": {"backend": "memory"}})


@pytest.fixture
def pipeline(config, store, identity, clock):
    pipe = QuizBankPipeline(config, store=store, identity=identity, links=DriveLinkResolver(), clock=clock)
    pipe.setup()
    return pipe
