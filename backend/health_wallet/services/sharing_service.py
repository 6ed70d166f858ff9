"""
Sharing ledger: read grants on individual reports.

A grant names its grantee by a canonical identifier (the lower-cased email).
Grantees are resolved to a user at grant time; an email with no account yet
becomes a pending invite that registration later binds to the new user.
There is no revocation.
"""

import logging
from datetime import datetime, timezone
from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.auth import UserPrincipal
from health_wallet.exceptions import AccessDenied, DuplicateGrant, InvalidGrant, NotFound
from health_wallet.models.permission import Permission, READ_ONLY
from health_wallet.models.report import Report
from health_wallet.models.user import User

logger = logging.getLogger(__name__)


def grant_matches(principal: UserPrincipal):
    """SQL condition selecting the grants that name `principal`."""
    return or_(
        Permission.grantee_user_id == principal.id,
        Permission.grantee_identifier == principal.email.lower(),
    )


class SharingService:
    async def _resolve_grantee(self, db: AsyncSession, grantee_identifier: str) -> tuple[str, User | None]:
        identifier = grantee_identifier.strip()
        if identifier.isdigit():
            user = await db.get(User, int(identifier))
            if not user:
                raise NotFound(f"User {identifier} not found")
            return user.email.lower(), user
        if "@" not in identifier:
            raise InvalidGrant("Grantee must be an email address or a user ID")
        email = identifier.lower()
        user = await db.scalar(select(User).where(User.email == email))
        return email, user

    async def _owned_report(self, db: AsyncSession, principal: UserPrincipal, report_id: int) -> Report:
        report = await db.get(Report, report_id)
        if not report:
            raise NotFound(f"Report {report_id} not found")
        if report.user_id != principal.id:
            raise AccessDenied(f"Report {report_id} is not owned by user {principal.id}")
        return report

    async def grant(
        self,
        db: AsyncSession,
        principal: UserPrincipal,
        report_id: int,
        grantee_identifier: str,
    ) -> Permission:
        report = await self._owned_report(db, principal, report_id)
        identifier, grantee = await self._resolve_grantee(db, grantee_identifier)

        if grantee and grantee.id == report.user_id:
            raise InvalidGrant("A report cannot be shared with its owner")

        existing = await db.scalar(
            select(Permission.id).where(
                Permission.report_id == report_id,
                Permission.grantee_identifier == identifier,
            )
        )
        if existing:
            raise DuplicateGrant(f"Report {report_id} is already shared with {identifier}")

        permission = Permission(
            report_id=report_id,
            grantee_identifier=identifier,
            grantee_user_id=grantee.id if grantee else None,
            access_level=READ_ONLY,
            granted_at=datetime.now(timezone.utc),
        )
        db.add(permission)
        try:
            await db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent identical grant
            await db.rollback()
            raise DuplicateGrant(f"Report {report_id} is already shared with {identifier}") from e

        logger.info(
            "Report %s shared with %s (%s)",
            report_id, identifier, "pending invite" if permission.is_pending else f"user {grantee.id}",
        )
        return permission

    async def check_access(self, db: AsyncSession, report_id: int, principal: UserPrincipal) -> bool:
        report = await db.get(Report, report_id)
        if not report:
            return False
        if report.user_id == principal.id:
            return True
        granted = await db.scalar(
            select(Permission.id)
            .where(Permission.report_id == report_id, grant_matches(principal))
            .limit(1)
        )
        return granted is not None

    async def grants_for_report(self, db: AsyncSession, principal: UserPrincipal, report_id: int) -> list[Permission]:
        await self._owned_report(db, principal, report_id)
        result = await db.execute(
            select(Permission)
            .where(Permission.report_id == report_id)
            .order_by(Permission.granted_at.desc(), Permission.id)
        )
        return list(result.scalars().all())

    async def reports_shared_with(self, db: AsyncSession, principal: UserPrincipal) -> list[Report]:
        result = await db.execute(
            select(Report)
            .join(Permission, Permission.report_id == Report.id)
            .where(grant_matches(principal))
            .distinct()
            .order_by(Report.uploaded_at.desc(), Report.id)
        )
        return list(result.scalars().all())

    async def bind_pending_grants(self, db: AsyncSession, user: User) -> int:
        """Attach pending invites addressed to `user`'s email. Caller commits."""
        result = await db.execute(
            update(Permission)
            .where(
                Permission.grantee_identifier == user.email.lower(),
                Permission.grantee_user_id.is_(None),
            )
            .values(grantee_user_id=user.id)
        )
        if result.rowcount:
            logger.info("Bound %d pending grants to user %s", result.rowcount, user.id)
        return result.rowcount


sharing_service = SharingService()
