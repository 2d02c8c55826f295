"""Repositories for the schemedesk database."""
from schemedesk.infra.database.repositories.attachment import DocumentRepository, ProofRepository
from schemedesk.infra.database.repositories.base import BaseRepository
from schemedesk.infra.database.repositories.notification import NotificationRepository
from schemedesk.infra.database.repositories.order import OrderRepository
from schemedesk.infra.database.repositories.scheme import SchemeRepository

__all__ = [
    "BaseRepository",
    "OrderRepository",
    "SchemeRepository",
    "NotificationRepository",
    "DocumentRepository",
    "ProofRepository",
]
