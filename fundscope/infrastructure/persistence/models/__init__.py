"""ORM model registry: imports every mapper class so it is registered with
Base.metadata before Alembic or SQLAlchemy runs.
"""

from fundscope.infrastructure.persistence.models.cache import CacheEntryRow

__all__ = ["CacheEntryRow"]
