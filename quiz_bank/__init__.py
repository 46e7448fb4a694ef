"""Quiz bank: parse chat transcripts into a classified question table."""

from .config import AppConfig
from .pipeline import QuizBankPipeline

__all__ = ["AppConfig", "QuizBankPipeline"]
