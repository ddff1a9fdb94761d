# apps/api/portal/core/database.py
import re
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from prisma import Prisma as Database
else:
    Database = Any

_OBJECT_ID = re.compile(r"[0-9a-fA-F]{24}")

# Global Prisma instance, created on first use
_prisma: Optional["Database"] = None


def get_client() -> "Database":
    """Return the process-wide Prisma client."""
    global _prisma
    if _prisma is None:
        from prisma import Prisma

        _prisma = Prisma()
    return _prisma


async def get_db() -> "Database":
    """Database dependency for FastAPI dependency injection."""
    return get_client()


def is_object_id(value: str) -> bool:
    """Whether ``value`` can be stored in an ``@db.ObjectId`` field."""
    return bool(_OBJECT_ID.fullmatch(value))
