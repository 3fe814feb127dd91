import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.functional_validators import AfterValidator, BeforeValidator

from ..models.activity import ActivityCategory, ActivityStatus

IMAGE_URL_PATTERN = re.compile(r"^https?://.+\.(jpg|jpeg|png|gif|webp)$", re.IGNORECASE)
VIDEO_URL_PATTERN = re.compile(r"^https?://.+\.(mp4|avi|mov|wmv|webm)$", re.IGNORECASE)

DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _coerce_date_only(value):
    # "2024-05-01" means midnight of that day
    if isinstance(value, str) and DATE_ONLY.match(value.strip()):
        return datetime.fromisoformat(value.strip())
    return value


def to_naive_utc(value: datetime) -> datetime:
    """Stored datetimes are naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UtcDateTime = Annotated[datetime, BeforeValidator(_coerce_date_only), AfterValidator(to_naive_utc)]


def _check_urls(urls: Optional[List[str]], pattern: re.Pattern, kind: str) -> Optional[List[str]]:
    if urls is None:
        return urls
    for url in urls:
        if not pattern.match(url):
            raise ValueError(f"Invalid {kind} URL: {url}")
    return urls


class ActivityCreate(BaseModel):
    """Schema for creating an activity."""
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    date: UtcDateTime
    location: str = Field(..., min_length=3, max_length=300)
    participants: int = Field(..., ge=1, le=10000)
    status: ActivityStatus = ActivityStatus.UPCOMING
    category: ActivityCategory
    images: List[str] = []
    videos: List[str] = []

    class Config:
        str_strip_whitespace = True
        use_enum_values = True
        validate_default = True

    @field_validator("images")
    @classmethod
    def check_images(cls, value):
        return _check_urls(value, IMAGE_URL_PATTERN, "image")

    @field_validator("videos")
    @classmethod
    def check_videos(cls, value):
        return _check_urls(value, VIDEO_URL_PATTERN, "video")


class ActivityUpdate(BaseModel):
    """Schema for updating an activity; only supplied fields are applied."""
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    date: Optional[UtcDateTime] = None
    location: Optional[str] = Field(None, min_length=3, max_length=300)
    participants: Optional[int] = Field(None, ge=1, le=10000)
    status: Optional[ActivityStatus] = None
    category: Optional[ActivityCategory] = None
    images: Optional[List[str]] = None
    videos: Optional[List[str]] = None

    class Config:
        str_strip_whitespace = True
        use_enum_values = True

    @field_validator("images")
    @classmethod
    def check_images(cls, value):
        return _check_urls(value, IMAGE_URL_PATTERN, "image")

    @field_validator("videos")
    @classmethod
    def check_videos(cls, value):
        return _check_urls(value, VIDEO_URL_PATTERN, "video")


class SortField(str, Enum):
    DATE = "date"
    TITLE = "title"
    PARTICIPANTS = "participants"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ActivityQuery(BaseModel):
    """Validated listing parameters."""
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    status: Optional[ActivityStatus] = None
    category: Optional[ActivityCategory] = None
    keyword: Optional[str] = Field(None, max_length=100)
    search: Optional[str] = Field(None, max_length=100)  # deprecated alias of keyword
    sort_by: SortField = Field(SortField.DATE, alias="sortBy")
    sort_order: SortOrder = Field(SortOrder.DESC, alias="sortOrder")
    date_from: Optional[UtcDateTime] = Field(None, alias="dateFrom")
    date_to: Optional[UtcDateTime] = Field(None, alias="dateTo")
    participants_min: Optional[int] = Field(None, ge=0, alias="participantsMin")
    participants_max: Optional[int] = Field(None, ge=0, alias="participantsMax")

    class Config:
        populate_by_name = True

    @field_validator("keyword", "search", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("date_to")
    @classmethod
    def check_date_range(cls, value, info):
        date_from = info.data.get("date_from")
        if value is not None and date_from is not None and value < date_from:
            raise ValueError("dateTo must be on or after dateFrom")
        return value

    @field_validator("participants_max")
    @classmethod
    def check_participants_range(cls, value, info):
        minimum = info.data.get("participants_min")
        if value is not None and minimum is not None and value < minimum:
            raise ValueError("participantsMax must be greater than or equal to participantsMin")
        return value

    @property
    def search_term(self) -> Optional[str]:
        """keyword wins over the legacy search parameter."""
        return self.keyword or self.search

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class MediaDeleteRequest(BaseModel):
    public_id: Optional[str] = Field(None, alias="publicId")
    resource_type: Literal["image", "video"] = Field("image", alias="resourceType")

    class Config:
        populate_by_name = True
