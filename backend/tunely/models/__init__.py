"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Session is the aggregate root for queue items; Artist owns sessions

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete before create_all
      or Alembic autogenerate runs
"""

from tunely.models.artist import Artist  # noqa: F401
from tunely.models.session import Session  # noqa: F401
from tunely.models.queue_item import QueueItem  # noqa: F401
