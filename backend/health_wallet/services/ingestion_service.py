"""
Ingestion pipeline: uploaded document -> stored blob -> OCR text -> vitals -> rows.

The report row and its vitals are written in one transaction. A failed OCR
call or a rejected write removes the stored blob again, so an ingestion
either leaves a report with all of its vitals or nothing at all.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.auth import UserPrincipal
from health_wallet.config import get_settings
from health_wallet.exceptions import AccessDenied, ExtractionUnavailable, NotFound, PersistenceFailure
from health_wallet.models.report import Report
from health_wallet.models.vital import Vital
from health_wallet.services.blob_store import LocalBlobStore
from health_wallet.services.text_source import TextSource, build_text_source
from health_wallet.services.vital_extractor import ExtractedVital, VitalExtractor

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    report: Report
    vitals: list[ExtractedVital]


class IngestionService:
    def __init__(
        self,
        text_source: TextSource,
        blob_store: LocalBlobStore,
        extractor: Optional[VitalExtractor] = None,
        default_category: str = "General",
    ):
        self.text_source = text_source
        self.blob_store = blob_store
        self.extractor = extractor or VitalExtractor()
        self.default_category = default_category

    async def _recognize(self, locator: str) -> list[ExtractedVital]:
        text = await self.text_source.recognize_text(self.blob_store.path_for(locator))
        return self.extractor.extract(text)

    @staticmethod
    def _vital_rows(report: Report, vitals: list[ExtractedVital], recorded_at: datetime) -> list[Vital]:
        return [
            Vital(
                report_id=report.id,
                user_id=report.user_id,
                vital_name=v.name,
                vital_value=v.value,
                recorded_at=recorded_at,
            )
            for v in vitals
        ]

    async def ingest(
        self,
        db: AsyncSession,
        owner: UserPrincipal,
        content: bytes,
        filename: Optional[str] = None,
        report_type: Optional[str] = None,
    ) -> IngestionResult:
        if not owner.can_upload:
            raise AccessDenied("Your role does not permit uploading reports")

        locator = await self.blob_store.store(content, filename)
        try:
            vitals = await self._recognize(locator)
        except (ExtractionUnavailable, asyncio.CancelledError):
            await self.blob_store.delete(locator)
            raise
        logger.info("Extracted %d vitals from %s", len(vitals), locator)

        now = datetime.now(timezone.utc)
        report = Report(
            user_id=owner.id,
            file_url=locator,
            original_filename=filename,
            report_type=(report_type or "").strip() or self.default_category,
            uploaded_at=now,
        )
        try:
            db.add(report)
            await db.flush()
            db.add_all(self._vital_rows(report, vitals, now))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            await self.blob_store.delete(locator)
            logger.error("Could not persist report for user %s: %s", owner.id, e)
            raise PersistenceFailure("Could not save report", {"error": str(e)}) from e

        logger.info("Report %s ingested for user %s", report.id, owner.id)
        return IngestionResult(report=report, vitals=vitals)

    async def reextract(self, db: AsyncSession, principal: UserPrincipal, report_id: int) -> IngestionResult:
        """Re-run OCR and extraction on a stored report, replacing its vitals."""
        report = await db.get(Report, report_id)
        if not report:
            raise NotFound(f"Report {report_id} not found")
        if report.user_id != principal.id:
            raise AccessDenied(f"Report {report_id} is not owned by user {principal.id}")
        if not await self.blob_store.exists(report.file_url):
            raise NotFound(f"Stored document for report {report_id} is missing")

        vitals = await self._recognize(report.file_url)
        try:
            await db.execute(delete(Vital).where(Vital.report_id == report.id))
            db.add_all(self._vital_rows(report, vitals, report.uploaded_at))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Could not replace vitals for report %s: %s", report_id, e)
            raise PersistenceFailure("Could not save extracted vitals", {"error": str(e)}) from e

        logger.info("Report %s re-extracted: %d vitals", report_id, len(vitals))
        return IngestionResult(report=report, vitals=vitals)


@lru_cache()
def get_ingestion_service() -> IngestionService:
    """Process-wide ingestion service, built once from settings."""
    settings = get_settings()
    return IngestionService(
        text_source=build_text_source(settings),
        blob_store=LocalBlobStore(settings.upload_dir),
        default_category=settings.default_report_category,
    )
