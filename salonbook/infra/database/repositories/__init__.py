"""Repositories for the salonbook database."""
from salonbook.infra.database.repositories.appointment import AppointmentRepository
from salonbook.infra.database.repositories.base import BaseRepository, violated_constraint
from salonbook.infra.database.repositories.partner import PartnerRepository
from salonbook.infra.database.repositories.payment import PartnerPaymentRepository, PaymentRepository
from salonbook.infra.database.repositories.plan import PlanRepository
from salonbook.infra.database.repositories.profile import ProfileRepository
from salonbook.infra.database.repositories.service_price import ServicePriceRepository

__all__ = [
    "BaseRepository",
    "violated_constraint",
    "PlanRepository",
    "AppointmentRepository",
    "ServicePriceRepository",
    "PartnerRepository",
    "ProfileRepository",
    "PaymentRepository",
    "PartnerPaymentRepository",
]
