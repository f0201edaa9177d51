"""PlanService: treatment plans and their session counters."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from salonbook.core.exceptions import NotFoundError, ValidationError
from salonbook.infra.database.models.plan import Plan
from salonbook.infra.database.repositories.appointment import AppointmentRepository
from salonbook.infra.database.repositories.plan import PlanRepository
from salonbook.ledger import plans as ledger
from salonbook.services.access import Actor, ensure_owner, require_admin

logger = logging.getLogger(__name__)

_EDITABLE = ("service_slug", "service_title", "plan_name", "total_sessions", "completed_sessions", "notes")


class PlanService:
    def __init__(self, session: AsyncSession) -> None:
        self._repo = PlanRepository(session)
        self._appointments = AppointmentRepository(session)

    async def get_plan(self, plan_id: UUID, actor: Optional[Actor] = None) -> Plan:
        plan = await self._repo.get_by_id(plan_id)
        if plan is None:
            raise NotFoundError(f"Plan {plan_id} not found", details={"plan_id": str(plan_id)})
        if actor is not None:
            ensure_owner(actor, plan.user_id)
        return plan

    async def create_plan(
        self,
        *,
        user_id: UUID,
        service_slug: str,
        service_title: str,
        plan_name: str,
        total_sessions: int,
        created_by: str = "auto",
        created_by_user_id: Optional[UUID] = None,
        notes: Optional[str] = None,
    ) -> Plan:
        total = ledger.validate_total_sessions(total_sessions)
        if not (plan_name or "").strip():
            raise ValidationError("plan_name is required", details={"field": "plan_name"})
        plan = await self._repo.create(
            {
                "user_id": user_id,
                "service_slug": service_slug,
                "service_title": service_title,
                "plan_name": plan_name.strip(),
                "total_sessions": total,
                "completed_sessions": 0,
                "status": ledger.PLAN_ACTIVE,
                "created_by": created_by,
                "created_by_user_id": created_by_user_id,
                "notes": notes,
            }
        )
        logger.info(
            "PlanService: created plan %s (%s %s x%d) for user %s",
            plan.id, service_slug, plan.plan_name, total, user_id,
            extra={"event": "plan_created", "plan_id": str(plan.id)},
        )
        return plan

    async def adjust_completed(self, plan_id: UUID, delta: int) -> Plan:
        plan = await self._repo.get_for_update(plan_id)
        if plan is None:
            raise NotFoundError(f"Plan {plan_id} not found", details={"plan_id": str(plan_id)})
        completed, status = ledger.adjust_completed(plan.completed_sessions, plan.total_sessions, delta)
        if (completed, status) == (plan.completed_sessions, plan.status):
            return plan
        plan = await self._repo.apply(plan, {"completed_sessions": completed, "status": status})
        logger.info(
            "PlanService: plan %s completed=%d/%d status=%s",
            plan.id, completed, plan.total_sessions, status,
            extra={"event": "plan_adjusted", "plan_id": str(plan.id)},
        )
        return plan

    async def edit_plan(self, plan_id: UUID, patch: Dict[str, Any]) -> Plan:
        """Rewrite editable fields, then bring the counters back into range."""
        plan = await self.get_plan(plan_id)
        unknown = set(patch) - set(_EDITABLE)
        if unknown:
            raise ValidationError(f"Fields not editable: {sorted(unknown)}")
        total = patch.get("total_sessions", plan.total_sessions)
        completed = patch.get("completed_sessions", plan.completed_sessions)
        if isinstance(completed, bool) or not isinstance(completed, int):
            raise ValidationError("completed_sessions must be an integer", details={"field": "completed_sessions"})
        completed, status = ledger.normalise_counters(completed, total)
        data = dict(patch)
        data.update({"completed_sessions": completed, "status": status})
        plan = await self._repo.apply(plan, data)
        logger.info("PlanService: edited plan %s fields=%s", plan.id, sorted(patch))
        return plan

    async def delete_plan(self, plan_id: UUID) -> None:
        """Hard delete. Appointments keep their plan_id."""
        if not await self._repo.delete(plan_id):
            raise NotFoundError(f"Plan {plan_id} not found", details={"plan_id": str(plan_id)})
        logger.info("PlanService: deleted plan %s", plan_id, extra={"plan_id": str(plan_id)})

    async def list_plans(
        self,
        actor: Actor,
        *,
        user_id: Optional[UUID] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Plan]:
        if not actor.is_admin:
            user_id = actor.user_id
            if user_id is None:
                require_admin(actor)
        return await self._repo.list_plans(user_id=user_id, status=status, skip=skip, limit=limit)

    @staticmethod
    def progress(plan: Plan) -> ledger.PlanProgress:
        return ledger.plan_progress(plan.completed_sessions, plan.total_sessions)

    async def next_session_number(self, plan: Plan) -> Optional[int]:
        claimed = await self._appointments.claimed_sessions(plan.id)
        return ledger.next_session_number(plan.total_sessions, claimed)
