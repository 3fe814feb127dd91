"""
Activity routes: CRUD, listing, statistics, filter options and media uploads.
"""
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import List, Optional

from ..activity_query import activity_stats, filter_options, list_activities
from ..config import Settings, get_settings
from ..database import get_db
from ..limiter import limiter
from ..logging_config import api_logger
from ..media_storage import MediaStorage, get_media_storage, purge_activity_media
from ..models.activity import Activity, utcnow
from ..responses import (
    bad_request,
    created,
    deleted,
    not_found,
    payload_too_large,
    success,
    updated,
    utc_timestamp,
)
from ..schemas.activity import ActivityCreate, ActivityQuery, ActivityUpdate, MediaDeleteRequest

settings = get_settings()

router = APIRouter(prefix="/api/activities", tags=["activities"])


def activity_to_dict(activity: Activity) -> dict:
    """Convert an Activity model to a dictionary response."""
    return {
        "id": activity.id,
        "title": activity.title,
        "description": activity.description,
        "date": activity.date.isoformat(),
        "location": activity.location,
        "participants": activity.participants,
        "status": activity.status,
        "category": activity.category,
        "images": activity.images or [],
        "videos": activity.videos or [],
        "createdAt": activity.created_at.isoformat() if activity.created_at else None,
        "updatedAt": activity.updated_at.isoformat() if activity.updated_at else None,
    }


def get_activity_or_404(db: Session, activity_id: int) -> Activity:
    activity = db.query(Activity).filter(Activity.id == activity_id).first()
    if not activity:
        not_found("Activity", activity_id)
    return activity


def activity_query_params(
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    category: Optional[str] = None,
    keyword: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = Query("date", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
    participants_min: Optional[int] = Query(None, alias="participantsMin"),
    participants_max: Optional[int] = Query(None, alias="participantsMax"),
) -> ActivityQuery:
    """Collect listing query parameters and validate them as a whole."""
    try:
        return ActivityQuery(
            page=page,
            limit=limit,
            status=status,
            category=category,
            keyword=keyword,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            date_from=date_from,
            date_to=date_to,
            participants_min=participants_min,
            participants_max=participants_max,
        )
    except ValidationError as e:
        raise RequestValidationError(e.errors())


@router.get("")
def get_activities(
    params: ActivityQuery = Depends(activity_query_params),
    db: Session = Depends(get_db),
):
    """List activities with filtering, sorting and pagination."""
    page = list_activities(db, params)
    return success(
        data={
            "activities": [activity_to_dict(a) for a in page.activities],
            "pagination": page.pagination,
            "filters": page.filters,
        },
        meta={
            "totalActivities": page.total,
            "queryTime": utc_timestamp(),
        },
    )


@router.get("/stats")
def get_activity_stats(db: Session = Depends(get_db)):
    """Counts by status and category, total records and total participants."""
    return success(activity_stats(db))


@router.get("/filters")
def get_filter_options(db: Session = Depends(get_db)):
    """Available filter values with counts, observed ranges and sort options."""
    return success(filter_options(db))


@router.post("/upload")
@limiter.limit(settings.upload_rate_limit)
def upload_media(
    request: Request,
    files: Optional[List[UploadFile]] = File(None),
    config: Settings = Depends(get_settings),
    storage: MediaStorage = Depends(get_media_storage),
):
    """
    Upload images and videos to the media host.

    Every file is attempted; a failed upload is reported in its own entry
    and does not stop the rest of the batch.
    """
    if not files:
        bad_request("No files were uploaded", "NO_FILES")
    if len(files) > config.max_files:
        bad_request(
            f"At most {config.max_files} files can be uploaded at once",
            "TOO_MANY_FILES",
            {"max_files": config.max_files},
        )

    payloads = []
    for file in files:
        content_type = file.content_type or ""
        if not (content_type.startswith("image/") or content_type.startswith("video/")):
            bad_request(
                "Only image and video files are accepted",
                "UNSUPPORTED_MEDIA_TYPE",
                {"filename": file.filename, "content_type": content_type},
            )
        content = file.file.read()
        if len(content) > config.max_file_size:
            payload_too_large(
                f"{file.filename} exceeds the {config.max_file_size} byte limit",
                {"filename": file.filename, "max_file_size": config.max_file_size},
            )
        payloads.append((file.filename, content_type, content))

    results = []
    for filename, content_type, content in payloads:
        try:
            uploaded = storage.upload(content, filename, content_type)
            results.append({
                "originalName": filename,
                "success": True,
                "url": uploaded.url,
                "publicId": uploaded.public_id,
                "resourceType": uploaded.resource_type,
            })
        except Exception as e:
            api_logger.error("Upload failed", error=e, filename=filename)
            results.append({
                "originalName": filename,
                "success": False,
                "error": "Upload failed",
            })

    return success(results, "Upload finished")


@router.delete("/upload/temp")
def delete_temp_media(
    payload: MediaDeleteRequest,
    storage: MediaStorage = Depends(get_media_storage),
):
    """Delete an uploaded file that was never attached to an activity."""
    if not payload.public_id:
        bad_request("publicId is required", "MISSING_PUBLIC_ID")

    result = storage.destroy(payload.public_id, payload.resource_type)
    return success(result, "File deleted")


@router.get("/{activity_id}")
def get_activity(activity_id: int, db: Session = Depends(get_db)):
    """Get a single activity by ID."""
    activity = get_activity_or_404(db, activity_id)
    return success(activity_to_dict(activity))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_activity(activity_data: ActivityCreate, db: Session = Depends(get_db)):
    """Create a new activity."""
    activity = Activity(**activity_data.model_dump())
    db.add(activity)
    db.commit()
    db.refresh(activity)

    api_logger.info("Created activity", activity_id=activity.id)
    return created(activity_to_dict(activity), "Activity created")


@router.put("/{activity_id}")
def update_activity(
    activity_id: int,
    activity_update: ActivityUpdate,
    db: Session = Depends(get_db),
):
    """Apply a partial update; omitted fields are left untouched."""
    activity = get_activity_or_404(db, activity_id)

    update_data = activity_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if value is not None:
            setattr(activity, key, value)
    activity.updated_at = utcnow()

    db.commit()
    db.refresh(activity)

    return updated(activity_to_dict(activity), "Activity updated")


@router.delete("/{activity_id}")
def delete_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
):
    """Delete an activity, cleaning up its hosted media on a best-effort basis."""
    activity = get_activity_or_404(db, activity_id)

    purged = purge_activity_media(storage, activity.images, activity.videos)

    db.delete(activity)
    db.commit()

    api_logger.info("Deleted activity", activity_id=activity_id, media_deleted=purged)
    return deleted("Activity deleted")
