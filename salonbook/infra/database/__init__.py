"""
salonbook.infra.database – PostgreSQL async engine, session, models and repositories.

Public API
──────────
  ensure_database_exists, build_engine, build_session_factory, init_db, close_engine
  Base and the booking models
  BaseRepository and one repository per table
"""
from salonbook.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from salonbook.infra.database.models import (
    Appointment,
    Base,
    ClientProfile,
    Partner,
    PartnerPayment,
    Payment,
    Plan,
    ServicePrice,
)
from salonbook.infra.database.repositories import (
    AppointmentRepository,
    BaseRepository,
    PartnerPaymentRepository,
    PartnerRepository,
    PaymentRepository,
    PlanRepository,
    ProfileRepository,
    ServicePriceRepository,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "init_db",
    "close_engine",
    "ensure_database_exists",
    "Base",
    "Plan",
    "Appointment",
    "ServicePrice",
    "Partner",
    "ClientProfile",
    "Payment",
    "PartnerPayment",
    "BaseRepository",
    "PlanRepository",
    "AppointmentRepository",
    "ServicePriceRepository",
    "PartnerRepository",
    "ProfileRepository",
    "PaymentRepository",
    "PartnerPaymentRepository",
]
