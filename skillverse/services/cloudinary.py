"""
Cloudinary service for SkillVerse
Handles uploads for chapter videos, chapter PDFs and user avatars
"""

import logging
from typing import Any, BinaryIO, Dict, Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from skillverse.core.config import Settings
from skillverse.core.exceptions import ExternalServiceException

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "avatars"
VIDEO_FOLDER = "SkillVerse/videos"
PDF_FOLDER = "SkillVerse/pdfs"


class CloudinaryStorage:
    """Media storage backed by Cloudinary"""

    def __init__(self, settings: Settings):
        """Initialize Cloudinary configuration"""
        if settings.cloudinary_configured():
            cloudinary.config(
                cloud_name=settings.CLOUDINARY_CLOUD_NAME,
                api_key=settings.CLOUDINARY_API_KEY,
                api_secret=settings.CLOUDINARY_API_SECRET,
                secure=True,
            )
            self.is_configured = True
            logger.info("Cloudinary configured successfully")
        else:
            self.is_configured = False
            logger.warning("Cloudinary not configured - missing credentials")

    def upload(
        self,
        stream: BinaryIO,
        folder: str,
        resource_type: str = "image",
        filename: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Upload a file stream to Cloudinary

        Args:
            stream: Open binary file object
            folder: Cloudinary folder name
            resource_type: ``image``, ``video`` or ``raw``
            filename: Original file name, kept for raw uploads

        Returns:
            ``{"url": ..., "public_id": ...}``

        Raises:
            ExternalServiceException: If storage is unconfigured or the upload fails
        """
        if not self.is_configured:
            raise ExternalServiceException("Cloudinary", "Media storage is not configured")

        options: Dict[str, Any] = {"folder": folder, "resource_type": resource_type}
        if filename and resource_type == "raw":
            options["use_filename"] = True
            options["filename_override"] = filename

        try:
            result = cloudinary.uploader.upload(stream, **options)
        except cloudinary.exceptions.Error as e:
            logger.error(f"Failed to upload to {folder}: {e}")
            raise ExternalServiceException("Cloudinary", "Upload failed")

        logger.info(f"Uploaded {resource_type} to Cloudinary: {result.get('public_id')}")
        return {"url": result["secure_url"], "public_id": result["public_id"]}

    def delete(self, public_id: str, resource_type: str = "image") -> bool:
        """Remove an asset; failures are logged and reported as False"""
        if not self.is_configured or not public_id:
            return False

        try:
            result = cloudinary.uploader.destroy(public_id, resource_type=resource_type)
        except cloudinary.exceptions.Error as e:
            logger.error(f"Failed to delete {public_id}: {e}")
            return False
        return result.get("result") == "ok"
