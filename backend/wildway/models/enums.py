"""Shared enum values used by the database models and schemas."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    user = "user"
    guide = "guide"
    lead_guide = "lead-guide"
    admin = "admin"


class TourDifficulty(str, enum.Enum):
    easy = "easy"
    medium = "medium"
    difficult = "difficult"
