"""ORM Models - SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so string-based relationship() references
      resolve before any query runs
"""

from marketplace.models.user import User  # noqa: F401
from marketplace.models.auth_session import AuthSession  # noqa: F401
from marketplace.models.category import Category  # noqa: F401
from marketplace.models.item import Item  # noqa: F401
