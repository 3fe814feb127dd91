"""
Media storage backed by Cloudinary.
"""
import io
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

import cloudinary.uploader
from fastapi import Depends

from .config import Settings, get_settings
from .logging_config import media_logger

IMAGE_TRANSFORMATION = [
    {"quality": "auto:good"},
    {"fetch_format": "auto"},
    {"width": 1200, "height": 800, "crop": "limit"},
]

VIDEO_TRANSFORMATION = [
    {"quality": "auto:good"},
    {"width": 1280, "height": 720, "crop": "limit"},
]

MAX_PURGE_WORKERS = 8


@dataclass
class UploadResult:
    url: str
    public_id: str
    resource_type: str


def resource_type_for(content_type: str) -> str:
    return "video" if (content_type or "").startswith("video/") else "image"


def public_id_from_url(url: str) -> str:
    """
    Recover the public id of an uploaded asset from its delivery URL.

    >>> public_id_from_url("https://res.cloudinary.com/demo/image/upload/v1/volunteer-activities/17-beach.webp")
    'volunteer-activities/17-beach'
    """
    return "/".join(url.split("/")[-2:]).split(".")[0]


class MediaStorage:
    """Uploads and deletes activity media on Cloudinary."""

    def __init__(self, settings: Settings):
        self.folder = settings.cloudinary_folder
        self._credentials = {
            "cloud_name": settings.cloudinary_cloud_name,
            "api_key": settings.cloudinary_api_key,
            "api_secret": settings.cloudinary_api_secret,
        }

    def upload(self, content: bytes, filename: str, content_type: str) -> UploadResult:
        resource_type = resource_type_for(content_type)
        stem = filename.split(".")[0]
        result = cloudinary.uploader.upload(
            io.BytesIO(content),
            resource_type=resource_type,
            folder=self.folder,
            public_id=f"{int(time.time() * 1000)}-{stem}",
            format="webp" if resource_type == "image" else "mp4",
            transformation=IMAGE_TRANSFORMATION if resource_type == "image" else VIDEO_TRANSFORMATION,
            **self._credentials,
        )
        media_logger.info(
            "Uploaded media",
            filename=filename,
            public_id=result["public_id"],
            resource_type=resource_type,
        )
        return UploadResult(
            url=result["secure_url"],
            public_id=result["public_id"],
            resource_type=resource_type,
        )

    def destroy(self, public_id: str, resource_type: str = "image") -> Dict:
        try:
            return cloudinary.uploader.destroy(
                public_id,
                resource_type=resource_type,
                **self._credentials,
            )
        except Exception as e:
            media_logger.error(
                "Failed to delete media",
                error=e,
                public_id=public_id,
                resource_type=resource_type,
            )
            raise


def get_media_storage(settings: Settings = Depends(get_settings)) -> MediaStorage:
    return MediaStorage(settings)


def _media_targets(images: Iterable[str], videos: Iterable[str]) -> List[Tuple[str, str]]:
    targets = [(public_id_from_url(url), "image") for url in images or []]
    targets += [(public_id_from_url(url), "video") for url in videos or []]
    return targets


def purge_activity_media(storage: MediaStorage, images: Iterable[str], videos: Iterable[str]) -> int:
    """
    Delete every image and video of an activity concurrently.

    Failures are logged and discarded. Returns the number of assets deleted.
    """
    targets = _media_targets(images, videos)
    if not targets:
        return 0

    deleted = 0
    with ThreadPoolExecutor(max_workers=min(len(targets), MAX_PURGE_WORKERS)) as pool:
        futures = [
            (public_id, pool.submit(storage.destroy, public_id, resource_type))
            for public_id, resource_type in targets
        ]
        for public_id, future in futures:
            try:
                future.result()
                deleted += 1
            except Exception as e:
                media_logger.warning("Media cleanup failed", error=e, public_id=public_id)

    return deleted
