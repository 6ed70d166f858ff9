from typing import Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from health_wallet.database import get_db
from health_wallet.schemas.report import IngestionResponse, ReportListResponse, ReportResponse
from health_wallet.schemas.vital import ExtractedVitalResponse
from health_wallet.services.ingestion_service import IngestionService, get_ingestion_service
from health_wallet.services.query_service import query_service
from health_wallet.services.report_service import ReportService, get_report_service
from health_wallet.services.sharing_service import sharing_service
from health_wallet.auth import get_current_user, UserPrincipal

router = APIRouter()


def _ingestion_response(result) -> IngestionResponse:
    return IngestionResponse(
        report_id=result.report.id,
        vitals=[ExtractedVitalResponse(name=v.name, value=v.value) for v in result.vitals],
    )


@router.post("/upload", response_model=IngestionResponse, status_code=201)
async def upload_report(
    report: UploadFile = File(...),
    report_type: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
    ingestion: IngestionService = Depends(get_ingestion_service),
):
    if not current_user.can_upload:
        raise HTTPException(status_code=403, detail="Your role does not permit uploading reports")
    content = await report.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    result = await ingestion.ingest(db, current_user, content, filename=report.filename, report_type=report_type)
    return _ingestion_response(result)


@router.get("/shared-with-me", response_model=ReportListResponse)
async def list_shared_with_me(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    reports = await sharing_service.reports_shared_with(db, current_user)
    return ReportListResponse(reports=[ReportResponse.model_validate(r) for r in reports], total=len(reports))


@router.get("/user/{user_id}", response_model=ReportListResponse)
async def list_reports(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    reports = await query_service.reports_visible_to(db, current_user, user_id)
    return ReportListResponse(reports=[ReportResponse.model_validate(r) for r in reports], total=len(reports))


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
    reports: ReportService = Depends(get_report_service),
):
    report = await reports.get_report(db, current_user, report_id)
    return ReportResponse.model_validate(report)


@router.get("/{report_id}/download")
async def download_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
    reports: ReportService = Depends(get_report_service),
):
    report, path = await reports.report_file(db, current_user, report_id)
    return FileResponse(path, filename=report.original_filename or path.name)


@router.post("/{report_id}/reextract", response_model=IngestionResponse)
async def reextract_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
    ingestion: IngestionService = Depends(get_ingestion_service),
):
    result = await ingestion.reextract(db, current_user, report_id)
    return _ingestion_response(result)


@router.delete("/{report_id}")
async def delete_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
    reports: ReportService = Depends(get_report_service),
):
    deleted = await reports.delete_report(db, current_user, report_id)
    return {"deleted": deleted, "report_id": report_id}
