"""
VoterReg Backend — Stored File Route
=====================================

What:  GET /files/{bucket}/{path} serves uploaded ID photos.
How:   BucketStorage.resolve maps the URL onto a file inside the bucket
       directory (rejecting absolute paths and `..`); the media type is
       guessed from the extension.
Who:   The public URLs saved on `application_registration` point here.
"""

import mimetypes

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.exceptions import NotFoundError
from app.services.bucket_storage import bucket_storage

router = APIRouter(tags=["Files"])


@router.get(
    "/files/{bucket}/{file_path:path}",
    summary="Serve an uploaded file",
    responses={
        200: {"description": "Image file"},
        404: {"description": "Bucket or file not found"},
    },
)
async def serve_file(bucket: str, file_path: str) -> FileResponse:
    full_path = bucket_storage.resolve(bucket, file_path)
    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=f"{bucket}/{file_path}")

    media_type, _ = mimetypes.guess_type(full_path.name)
    return FileResponse(
        path=str(full_path),
        media_type=media_type or "application/octet-stream",
        headers={"Cache-Control": "private, max-age=3600"},
    )
