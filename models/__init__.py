"""
Models package initialization.
"""

from .base import Base, BaseModel
from .file import FileRecord
from .submission import Submission, SubmissionStatus

__all__ = [
    "Base",
    "BaseModel",
    "FileRecord",
    "Submission",
    "SubmissionStatus",
]
