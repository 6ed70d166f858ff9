import logging
from functools import lru_cache
from pathlib import Path
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.auth import UserPrincipal
from health_wallet.config import get_settings
from health_wallet.exceptions import AccessDenied, NotFound, PersistenceFailure
from health_wallet.models.report import Report
from health_wallet.services.blob_store import LocalBlobStore
from health_wallet.services.sharing_service import sharing_service

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, blob_store: LocalBlobStore):
        self.blob_store = blob_store

    async def get_report(self, db: AsyncSession, principal: UserPrincipal, report_id: int) -> Report:
        report = await db.get(Report, report_id)
        if not report:
            raise NotFound(f"Report {report_id} not found")
        if not await sharing_service.check_access(db, report_id, principal):
            raise AccessDenied(f"Report {report_id} has not been shared with you")
        return report

    async def report_file(self, db: AsyncSession, principal: UserPrincipal, report_id: int) -> tuple[Report, Path]:
        report = await self.get_report(db, principal, report_id)
        path = self.blob_store.path_for(report.file_url)
        if not await self.blob_store.exists(report.file_url):
            raise NotFound(f"Stored document for report {report_id} is missing")
        return report, path

    async def delete_report(self, db: AsyncSession, principal: UserPrincipal, report_id: int) -> bool:
        """
        Delete a report together with its vitals, its grants and the stored blob.

        Deleting an unknown report is a no-op and returns False.
        """
        report = await db.get(Report, report_id)
        if not report:
            return False
        if report.user_id != principal.id:
            raise AccessDenied("Only the owner can delete a report")

        locator = report.file_url
        try:
            await db.delete(report)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Could not delete report %s: %s", report_id, e)
            raise PersistenceFailure("Could not delete report", {"error": str(e)}) from e
        await self.blob_store.delete(locator)
        logger.info("Report %s deleted by user %s", report_id, principal.id)
        return True


@lru_cache()
def get_report_service() -> ReportService:
    return ReportService(LocalBlobStore(get_settings().upload_dir))
