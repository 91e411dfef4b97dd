"""Security utilities"""

from .logging import log_quiz_event

__all__ = ["log_quiz_event"]
