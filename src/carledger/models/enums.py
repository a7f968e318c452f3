"""Shared enums for models."""

from enum import Enum


class Role(str, Enum):
    """User role.

    Roles form no hierarchy: every gate lists the roles it admits.
    """

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    SALES = "SALES"
    MARKETING = "MARKETING"
    USER = "USER"
