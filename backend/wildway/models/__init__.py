"""Convenience imports for Alembic metadata discovery."""

from wildway.models.user import User
from wildway.models.tour import Tour
from wildway.models.booking import Booking

__all__ = ["Booking", "Tour", "User"]
