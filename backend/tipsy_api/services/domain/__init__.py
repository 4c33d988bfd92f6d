"""
Domain Services - application layer.

Routers stay thin: they authenticate, parse the body and hand over to a
service, which owns the business rules and the transaction.

Structure:
    Router (thin controller)
        ↓
    Service (business logic, one commit per operation)
        ↓
    Model (entity)

Usage:
    from tipsy_api.services.domain import TipService

    service = TipService(db)
    receipt = service.submit(data)
"""

from .identity_service import IdentityService
from .tip_service import TipService
from .review_service import ReviewService
from .restaurant_service import RestaurantService
from .staff_service import StaffService
from .invitation_service import InvitationService
from .notification_service import NotificationService
from .feature_service import FeatureService
from .worker_service import WorkerService
from .profile_service import ProfileService
from .payment_service import PaymentLinkProvider, StubPaymentLinkProvider, get_payment_provider

__all__ = [
    "IdentityService",
    "TipService",
    "ReviewService",
    "RestaurantService",
    "StaffService",
    "InvitationService",
    "NotificationService",
    "FeatureService",
    "WorkerService",
    "ProfileService",
    "PaymentLinkProvider",
    "StubPaymentLinkProvider",
    "get_payment_provider",
]
