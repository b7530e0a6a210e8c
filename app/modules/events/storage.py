"""Object storage for event header images: Supabase Storage, or S3 when configured."""
import logging
from typing import Optional

import boto3
from botocore.exceptions import ClientError
from supabase import Client

from app.config import settings

logger = logging.getLogger(__name__)


class SupabaseImageStorage:
    def __init__(self, supabase: Client, bucket_name: Optional[str] = None):
        self.supabase = supabase
        self.bucket_name = bucket_name or settings.header_image_bucket

    def upload_file(self, file_content: bytes, key: str, content_type: str) -> Optional[str]:
        """Upload to the bucket and return the storage key (bucket/name), or None if the response was empty"""
        try:
            response = self.supabase.storage.from_(self.bucket_name).upload(
                key,
                file_content,
                file_options={"content-type": content_type}
            )
        except Exception as e:
            logger.error(f"Supabase Storage upload failed: {str(e)}")
            raise
        if not response:
            return None
        return getattr(response, "full_path", None) or f"{self.bucket_name}/{key}"


class S3ImageStorage:
    def __init__(self):
        if not settings.s3_configured:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    def upload_file(self, file_content: bytes, key: str, content_type: str) -> Optional[str]:
        """Upload file to S3 and return the S3 URL"""
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=f"{settings.header_image_bucket}/{key}",
                Body=file_content,
                ContentType=content_type
            )
            return f"s3://{self.bucket_name}/{settings.header_image_bucket}/{key}"
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise


def get_header_image_storage(supabase: Client):
    """S3 when AWS credentials are configured, Supabase Storage otherwise"""
    if settings.s3_configured:
        try:
            return S3ImageStorage()
        except Exception as e:
            logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
    return SupabaseImageStorage(supabase)
