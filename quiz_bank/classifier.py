"""Keyword classification of question text into topic and question type."""

from __future__ import annotations

from typing import Optional, Sequence

from .constants import FALLBACK_TOPIC, FALLBACK_TYPE, QUESTION_TYPES, TOPIC_CATEGORIES, Category
from .schemas import TopicResult, TypeResult


def _first_match(text: str, categories: Sequence[Category]) -> Optional[Category]:
    lowered = (text or "").lower()
    for category in categories:
        if any(keyword.lower() in lowered for keyword in category.keywords):
            return category
    return None


class Classifier:
    """First-match keyword classifier over ordered category tables."""

    def __init__(
        self,
        topics: Sequence[Category] = TOPIC_CATEGORIES,
        question_types: Sequence[Category] = QUESTION_TYPES,
        fallback_topic: Category = FALLBACK_TOPIC,
        fallback_type: Category = FALLBACK_TYPE,
    ):
        self.topics = tuple(topics)
        self.question_types = tuple(question_types)
        self.fallback_topic = fallback_topic
        self.fallback_type = fallback_type

    def classify_topic(self, text: str) -> TopicResult:
        match = _first_match(text, self.topics)
        if match is None:
            return TopicResult(self.fallback_topic.name, self.fallback_topic.emoji, matched=False)
        return TopicResult(match.name, match.emoji)

    def classify_type(self, text: str) -> TypeResult:
        match = _first_match(text, self.question_types)
        if match is None:
            return TypeResult(self.fallback_type.name, self.fallback_type.emoji, matched=False)
        return TypeResult(match.name, match.emoji)

    def topic_by_name(self, name: str) -> Optional[TopicResult]:
        """Look up a topic by exact name, including the fallback."""
        for category in self.topics + (self.fallback_topic,):
            if category.name == name:
                return TopicResult(category.name, category.emoji)
        return None


_DEFAULT = Classifier()


def classify_topic(text: str) -> TopicResult:
    return _DEFAULT.classify_topic(text)


def classify_type(text: str) -> TypeResult:
    return _DEFAULT.classify_type(text)
