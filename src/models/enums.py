"""Enums for model fields."""

from enum import Enum


class Role(str, Enum):
    """User roles. There is no hierarchy: every allowed role is listed explicitly."""

    USER = "user"
    GUIDE = "guide"
    LEAD_GUIDE = "lead-guide"
    ADMIN = "admin"


class Difficulty(str, Enum):
    """Tour difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    DIFFICULT = "difficult"
