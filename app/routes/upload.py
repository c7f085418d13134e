from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
import boto3
from botocore.exceptions import ClientError
import logging
import uuid

from app.config import settings
from app.dependencies import get_current_email

logger = logging.getLogger(__name__)

router = APIRouter()

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

class PresignedUrlRequest(BaseModel):
    filename: str
    content_type: str

class PresignedUrlResponse(BaseModel):
    upload_url: str
    file_key: str
    public_url: str
    expires_in: int

def get_s3_client():
    return boto3.client(
        's3',
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=settings.AWS_REGION,
    )

@router.post("/presigned-url/image", response_model=PresignedUrlResponse)
def get_presigned_image_url(
    request: PresignedUrlRequest,
    email: str = Depends(get_current_email),
):
    """Presigned PUT URL for a club or event image (15 min)"""
    if not settings.AWS_BUCKET_NAME:
        raise HTTPException(status_code=503, detail="Image upload is not configured")

    extension = ALLOWED_IMAGE_TYPES.get(request.content_type)
    if not extension:
        raise HTTPException(status_code=400, detail="Unsupported file type. Use JPG, PNG or WEBP.")

    file_key = f"images/{uuid.uuid4()}.{extension}"
    try:
        presigned_url = get_s3_client().generate_presigned_url(
            'put_object',
            Params={
                'Bucket': settings.AWS_BUCKET_NAME,
                'Key': file_key,
                'ContentType': request.content_type,
            },
            ExpiresIn=900
        )
    except ClientError as e:
        logger.exception("Presigned URL generation failed for %s", email)
        raise HTTPException(status_code=500, detail={"message": "Storage error", "error": str(e)})

    return PresignedUrlResponse(
        upload_url=presigned_url,
        file_key=file_key,
        public_url=f"https://{settings.AWS_BUCKET_NAME}.s3.{settings.AWS_REGION}.amazonaws.com/{file_key}",
        expires_in=900,
    )
