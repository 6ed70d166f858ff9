from sqlalchemy import select, exists
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.auth import UserPrincipal
from health_wallet.models.permission import Permission
from health_wallet.models.report import Report
from health_wallet.models.vital import Vital
from health_wallet.services.sharing_service import grant_matches


def _shared_with(principal: UserPrincipal):
    """Reports carrying at least one grant for `principal`."""
    return exists().where(Permission.report_id == Report.id, grant_matches(principal))


class QueryService:
    """
    Read paths. Everything is newest first; rows with equal timestamps keep
    insertion order.
    """

    async def vitals_for(self, db: AsyncSession, owner_id: int) -> list[Vital]:
        result = await db.execute(
            select(Vital)
            .where(Vital.user_id == owner_id)
            .order_by(Vital.recorded_at.desc(), Vital.id)
        )
        return list(result.scalars().all())

    async def reports_for(self, db: AsyncSession, owner_id: int) -> list[Report]:
        result = await db.execute(
            select(Report)
            .where(Report.user_id == owner_id)
            .order_by(Report.uploaded_at.desc(), Report.id)
        )
        return list(result.scalars().all())

    async def vitals_visible_to(self, db: AsyncSession, principal: UserPrincipal, owner_id: int) -> list[Vital]:
        """Owner sees all vitals; anyone else only those of reports shared with them."""
        if principal.id == owner_id:
            return await self.vitals_for(db, owner_id)
        result = await db.execute(
            select(Vital)
            .join(Report, Report.id == Vital.report_id)
            .where(Vital.user_id == owner_id, _shared_with(principal))
            .order_by(Vital.recorded_at.desc(), Vital.id)
        )
        return list(result.scalars().all())

    async def reports_visible_to(self, db: AsyncSession, principal: UserPrincipal, owner_id: int) -> list[Report]:
        if principal.id == owner_id:
            return await self.reports_for(db, owner_id)
        result = await db.execute(
            select(Report)
            .where(Report.user_id == owner_id, _shared_with(principal))
            .order_by(Report.uploaded_at.desc(), Report.id)
        )
        return list(result.scalars().all())

    async def report_exists(self, db: AsyncSession, report_id: int) -> bool:
        return bool(await db.scalar(select(exists().where(Report.id == report_id))))


query_service = QueryService()
