"""
Models package

All database models live in separate files:
- user.py
- log.py
"""

from .user import User
from .log import Log

__all__ = [
    "User",
    "Log",
]
