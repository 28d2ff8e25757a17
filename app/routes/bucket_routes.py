from fastapi import APIRouter
from app.services.bucket_state_services import BucketStateService
from app.schemas.bucket_schemas import BucketCreated, StateResponse

state_service = BucketStateService()

router = APIRouter(
    prefix="/api",
    tags=["Buckets"],
)

@router.get("/state", response_model=StateResponse)
def get_state():
    # Recomputed from disk on every call
    return state_service.get_state()

@router.post("/buckets", response_model=BucketCreated)
def create_bucket():
    return BucketCreated(bucket=state_service.create_bucket())
