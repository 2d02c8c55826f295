"""Payment gateway adapters."""
from schemedesk.infra.payments.razorpay import RazorpayGateway

__all__ = ["RazorpayGateway"]
