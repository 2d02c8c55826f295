"""
schemedesk.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from schemedesk.infra.database.models.account import Admin, User
from schemedesk.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from schemedesk.infra.database.models.notification import Notification
from schemedesk.infra.database.models.order import Document, Order, Proof
from schemedesk.infra.database.models.scheme import Scheme

__all__ = [
    "Base",
    "TimestampMixin",
    "_uuid_pk",
    "User",
    "Admin",
    "Scheme",
    "Order",
    "Document",
    "Proof",
    "Notification",
]
