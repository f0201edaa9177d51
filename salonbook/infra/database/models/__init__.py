"""
salonbook.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from salonbook.infra.database.models.appointment import SESSION_INDEX, SLOT_INDEX, Appointment
from salonbook.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from salonbook.infra.database.models.partner import Partner
from salonbook.infra.database.models.payment import PartnerPayment, Payment
from salonbook.infra.database.models.plan import Plan
from salonbook.infra.database.models.profile import ClientProfile
from salonbook.infra.database.models.service_price import ServicePrice

__all__ = [
    "Base",
    "TimestampMixin",
    "_uuid_pk",
    "Plan",
    "Appointment",
    "SLOT_INDEX",
    "SESSION_INDEX",
    "ServicePrice",
    "Partner",
    "ClientProfile",
    "Payment",
    "PartnerPayment",
]
