import logging
import uuid
from pathlib import Path
from typing import List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from greencredits.api.deps import current_user_id, get_submission_service, get_user_service
from greencredits.core.config import Settings, get_settings
from greencredits.core.errors import GreenCreditsError
from greencredits.models.report import ReportFields
from greencredits.schemas.report import ReportOut, SubmitReportResponse
from greencredits.services.submission import ReportSubmissionService, validate_description
from greencredits.services.users_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

ALLOWED = {"image/jpeg", "image/png", "image/jpg", "image/webp"}
EXTENSIONS = {"image/png": ".png", "image/webp": ".webp"}


async def _save_photo(photo: UploadFile, settings: Settings) -> str:
    if photo.content_type not in ALLOWED:
        raise HTTPException(400, f"Unsupported file type: {photo.content_type}")
    data = await photo.read()
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(413, "Photo is too large")

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    safe_name = f"report-{uuid.uuid4().hex}{EXTENSIONS.get(photo.content_type, '.jpg')}"
    (upload_dir / safe_name).write_bytes(data)
    logger.info("photo saved name=%s size=%s", safe_name, len(data))
    return f"/uploads/{safe_name}"


def _discard_photo(photo_url: str, settings: Settings) -> None:
    path = Path(settings.upload_dir) / Path(photo_url).name
    path.unlink(missing_ok=True)
    logger.info("photo discarded name=%s", path.name)


# =========================
# Submit Report
# =========================
@router.post("", response_model=SubmitReportResponse, status_code=201)
async def submit_report(
    description: str = Form(...),
    lat: Optional[str] = Form(default=None),
    lng: Optional[str] = Form(default=None),
    address: Optional[str] = Form(default=None),
    waste_category: Optional[str] = Form(default=None),
    disposal_method: Optional[str] = Form(default=None),
    photo: Optional[UploadFile] = File(default=None),
    user_id: ObjectId = Depends(current_user_id),
    service: ReportSubmissionService = Depends(get_submission_service),
    settings: Settings = Depends(get_settings),
):
    # reject before the photo touches the disk
    validate_description(description, settings.min_description_length)

    photo_url = None
    if photo is not None and photo.filename:
        photo_url = await _save_photo(photo, settings)

    fields = ReportFields(
        description=description,
        photo_url=photo_url,
        lat=lat,
        lng=lng,
        address=address,
        waste_category=waste_category,
        disposal_method=disposal_method,
    )
    try:
        result = await service.submit(user_id, fields)
    except GreenCreditsError as exc:
        # a stored report keeps its photo even when its rewards are outstanding
        if photo_url and getattr(exc, "report_id", None) is None:
            _discard_photo(photo_url, settings)
        raise
    return {
        "message": result.message,
        "report_id": result.report_id,
        "zone": result.assigned_zone,
        "credits_earned": result.credits_earned,
        "base_credits": result.base_credits,
        "streak_bonus": result.streak_bonus,
        "streak": result.streak,
        "longest_streak": result.longest_streak,
        "streak_multiplier": result.streak_multiplier,
        "quality_score": result.quality_score,
        "new_badges": result.new_badges,
    }


# =========================
# My Reports
# =========================
@router.get("/mine", response_model=List[ReportOut])
async def my_reports(
    user_id: ObjectId = Depends(current_user_id),
    users: UserService = Depends(get_user_service),
):
    return await users.list_reports(user_id)
