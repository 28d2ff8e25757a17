from pydantic import BaseModel, Field
from typing import Any, List


class Limits(BaseModel):
    max_bucket_photos: int = Field(alias="maxBucketPhotos")
    max_bucket_bytes: int = Field(alias="maxBucketBytes")


class ImageInfo(BaseModel):
    name: str
    size_bytes: int = Field(alias="sizeBytes")
    mtime_ms: float = Field(alias="mtimeMs")


class BucketStats(BaseModel):
    name: str
    photo_count: int = Field(alias="photoCount")
    total_bytes: int = Field(alias="totalBytes")


class StateResponse(BaseModel):
    root: str
    limits: Limits
    images: List[ImageInfo]
    buckets: List[BucketStats]


class BucketCreated(BaseModel):
    bucket: BucketStats


class MoveImageRequest(BaseModel):
    # Any JSON value is accepted here; MoveService validates both names.
    image_name: Any = Field(default=None, alias="imageName")
    bucket_name: Any = Field(default=None, alias="bucketName")


class MoveImageResponse(BaseModel):
    ok: bool = True
    bucket: BucketStats
    removed: str
