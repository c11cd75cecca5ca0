"""CLI commands for lift-records."""

from .exercises import exercises
from .init import init
from .log import log
from .records import records
from .users import users

__all__ = [
    "exercises",
    "init",
    "log",
    "records",
    "users",
]
