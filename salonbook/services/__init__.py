"""Service layer: plans, appointments, pricing, partners, earnings, counter sales, messaging."""
from salonbook.services.access import Actor, ensure_owner, require_admin
from salonbook.services.appointment_service import AppointmentService
from salonbook.services.counter_sale_service import CounterSaleService, SaleItem, SaleResult
from salonbook.services.earnings_service import EarningsService
from salonbook.services.notification_service import NotificationService
from salonbook.services.partner_service import PartnerService
from salonbook.services.plan_service import PlanService
from salonbook.services.pricing_service import PricingService
from salonbook.services.reminder_service import ReminderService

__all__ = [
    "Actor",
    "ensure_owner",
    "require_admin",
    "PlanService",
    "AppointmentService",
    "PricingService",
    "PartnerService",
    "EarningsService",
    "CounterSaleService",
    "SaleItem",
    "SaleResult",
    "NotificationService",
    "ReminderService",
]
