# ruff: noqa: F403, F401
"""Schemas package initialization."""

from .auth import *
from .base import *
from .file import *
from .submission import *
