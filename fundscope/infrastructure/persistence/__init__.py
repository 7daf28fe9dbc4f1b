"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic autogenerate and SQLAlchemy mapper configuration)
and exports the repository implementations.
"""

from fundscope.infrastructure.persistence.models import *  # noqa: F401, F403
from fundscope.infrastructure.persistence.models import __all__ as _orm_all
from fundscope.infrastructure.persistence.repositories import SqlTimedCache

__all__ = _orm_all + ["SqlTimedCache"]
