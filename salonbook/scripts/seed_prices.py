#!/usr/bin/env python3
"""Seed the service price table with the clinic's standard tiers.

Existing (service, plan) rows are updated in place, so re-running is safe.

Run:
    python -m salonbook.scripts.seed_prices
"""
from __future__ import annotations

import asyncio
import logging

from salonbook.core.logger import configure
from salonbook.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from salonbook.ledger.pricing import parse_brl
from salonbook.services.pricing_service import PricingService

# Named explicitly: under -m this module is __main__, outside the salonbook logger tree
logger = logging.getLogger("salonbook.scripts.seed_prices")

# (service_slug, plan_name, sessions, price per session)
PRICE_TABLE = [
    ("drenagem-linfatica", "Essencial", 5, "R$ 150,00"),
    ("drenagem-linfatica", "Premium", 10, "R$ 130,00"),
    ("drenagem-linfatica", "VIP", 20, "R$ 110,00"),
    ("criolipolise", "Essencial", 1, "R$ 500,00"),
    ("criolipolise", "Premium", 2, "R$ 450,00"),
    ("criolipolise", "VIP", 3, "R$ 400,00"),
    ("botox", "Essencial", 1, "R$ 800,00"),
    ("botox", "Premium", 2, "R$ 700,00"),
    ("botox", "VIP", 3, "R$ 650,00"),
    ("carboxiterapia", "Essencial", 5, "R$ 200,00"),
    ("carboxiterapia", "Premium", 10, "R$ 170,00"),
    ("carboxiterapia", "VIP", 20, "R$ 150,00"),
    ("peeling-de-diamante", "Essencial", 3, "R$ 180,00"),
    ("peeling-de-diamante", "Premium", 6, "R$ 155,00"),
    ("peeling-de-diamante", "VIP", 10, "R$ 135,00"),
    ("peeling-de-cristal", "Essencial", 3, "R$ 180,00"),
    ("peeling-de-cristal", "Premium", 6, "R$ 155,00"),
    ("peeling-de-cristal", "VIP", 10, "R$ 135,00"),
    ("massagem-redutora", "Essencial", 5, "R$ 130,00"),
    ("massagem-redutora", "Premium", 10, "R$ 115,00"),
    ("massagem-redutora", "VIP", 15, "R$ 100,00"),
    ("massagem-modeladora", "Essencial", 5, "R$ 140,00"),
    ("massagem-modeladora", "Premium", 10, "R$ 120,00"),
    ("massagem-modeladora", "VIP", 15, "R$ 105,00"),
    ("limpeza-de-pele", "Essencial", 1, "R$ 120,00"),
    ("limpeza-de-pele", "Premium", 6, "R$ 100,00"),
    ("limpeza-de-pele", "VIP", 12, "R$ 85,00"),
    ("microagulhamento", "Essencial", 3, "R$ 350,00"),
    ("microagulhamento", "Premium", 4, "R$ 300,00"),
    ("microagulhamento", "VIP", 6, "R$ 270,00"),
    ("radiofrequencia", "Essencial", 4, "R$ 250,00"),
    ("radiofrequencia", "Premium", 8, "R$ 215,00"),
    ("radiofrequencia", "VIP", 12, "R$ 190,00"),
    ("protocolo-pos-operatorio", "Essencial", 5, "R$ 200,00"),
    ("protocolo-pos-operatorio", "Premium", 10, "R$ 175,00"),
    ("protocolo-pos-operatorio", "VIP", 20, "R$ 150,00"),
]


async def seed() -> None:
    await ensure_database_exists()
    engine = build_engine()
    session_factory = build_session_factory(engine)
    await init_db()

    created = updated = 0
    async with session_factory() as session:
        svc = PricingService(session)
        for slug, plan_name, sessions, price in PRICE_TABLE:
            _, was_created = await svc.upsert_price(
                service_slug=slug,
                plan_name=plan_name,
                sessions=sessions,
                price_per_session_cents=parse_brl(price),
            )
            if was_created:
                created += 1
            else:
                updated += 1
        await session.commit()

    await close_engine()
    logger.info("Price seed complete: %d created, %d updated.", created, updated)


if __name__ == "__main__":
    configure()
    asyncio.run(seed())
