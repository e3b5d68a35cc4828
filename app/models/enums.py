"""Enum types mirroring the ``users`` table constraints."""

from enum import Enum


class UserRole(str, Enum):
    """Kind of learner a profile belongs to."""
    student = "student"
    professional = "professional"
