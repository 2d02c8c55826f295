"""Service layer: order lifecycle, payments, proofs, documents and notifications."""
from schemedesk.services.document_service import DocumentService
from schemedesk.services.notification_service import DatabaseNotifier, NotificationService
from schemedesk.services.order_service import OrderService, QueuePage, TransitionResult
from schemedesk.services.payment_service import PaymentOrder, PaymentService
from schemedesk.services.proof_service import ProofService

__all__ = [
    "OrderService",
    "TransitionResult",
    "QueuePage",
    "PaymentService",
    "PaymentOrder",
    "ProofService",
    "DocumentService",
    "NotificationService",
    "DatabaseNotifier",
]
