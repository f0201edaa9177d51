"""
salonbook config: frozen dataclasses loaded from env.

load_postgres_config(), load_booking_config(), load_evolution_config().
"""
from salonbook.config.booking import BookingConfig, load_booking_config
from salonbook.config.evolution import EvolutionConfig, load_evolution_config
from salonbook.config.postgres import PostgresConfig, load_postgres_config

__all__ = [
    "PostgresConfig",
    "load_postgres_config",
    "BookingConfig",
    "load_booking_config",
    "EvolutionConfig",
    "load_evolution_config",
]
