import mimetypes

from fastapi import APIRouter, Query
from fastapi.responses import FileResponse
from app.services.bucket_state_services import BucketStateService
from app.services.move_services import MoveService
from app.schemas.bucket_schemas import MoveImageRequest, MoveImageResponse

state_service = BucketStateService()
move_service = MoveService(state_service)

router = APIRouter(
    prefix="/api",
    tags=["Images"],
)

@router.get("/image")
def get_image(name: str = Query("")):
    """Raw bytes of an image that is still in the root folder."""
    path = state_service.get_root_image_path(name)
    media_type, _ = mimetypes.guess_type(name)
    return FileResponse(path, media_type=media_type or "application/octet-stream")

@router.post("/move", response_model=MoveImageResponse)
def move_image(data: MoveImageRequest):
    return move_service.move_image(data.image_name, data.bucket_name)
