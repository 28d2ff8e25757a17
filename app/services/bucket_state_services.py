import logging
import os
import stat
import threading
from typing import List

from app.core.config import settings
from app.core.errors import InvalidNameError, NotFoundError, StorageError, root_not_set
from app.core.naming import is_bucket_name, is_image_file_name, is_valid_image_name
from app.schemas.bucket_schemas import BucketStats, ImageInfo, Limits, StateResponse

logger = logging.getLogger(__name__)


class BucketStateService:
    """Reads images and buckets straight off the root folder. Nothing is cached."""

    def __init__(self, config=settings):
        self.settings = config
        self._create_lock = threading.Lock()

    def require_root(self) -> str:
        root = self.settings.image_root()
        if root is None:
            raise root_not_set()
        return root

    def limits(self) -> Limits:
        return Limits(
            maxBucketPhotos=self.settings.MAX_BUCKET_PHOTOS,
            maxBucketBytes=self.settings.MAX_BUCKET_BYTES,
        )

    def list_buckets(self, root: str) -> List[str]:
        """Numeric subfolder names, sorted by value ("10" after "2")."""
        with os.scandir(root) as entries:
            names = [
                e.name for e in entries
                if e.is_dir(follow_symlinks=False) and is_bucket_name(e.name)
            ]
        names.sort(key=int)
        return names

    def list_root_images(self, root: str) -> List[ImageInfo]:
        with os.scandir(root) as entries:
            files = sorted(
                e.name for e in entries
                if e.is_file(follow_symlinks=False) and is_image_file_name(e.name)
            )

        images = []
        for name in files:
            st = os.stat(os.path.join(root, name))
            images.append(ImageInfo(
                name=name,
                sizeBytes=st.st_size,
                mtimeMs=st.st_mtime_ns / 1_000_000,
            ))
        return images

    def get_bucket_stats(self, root: str, bucket_name: str) -> BucketStats:
        # Every file counts toward totalBytes; only image extensions count as photos.
        bucket_path = os.path.join(root, bucket_name)
        total_bytes = 0
        photo_count = 0
        with os.scandir(bucket_path) as entries:
            for entry in entries:
                if not entry.is_file(follow_symlinks=False):
                    continue
                total_bytes += entry.stat(follow_symlinks=False).st_size
                if is_image_file_name(entry.name):
                    photo_count += 1

        return BucketStats(name=bucket_name, photoCount=photo_count, totalBytes=total_bytes)

    def get_state(self) -> StateResponse:
        root = self.require_root()
        try:
            st = os.stat(root)
            if not stat.S_ISDIR(st.st_mode):
                raise NotADirectoryError(f"IMAGE_ROOT is not a directory: {root}")

            images = self.list_root_images(root)
            buckets = [self.get_bucket_stats(root, b) for b in self.list_buckets(root)]
        except OSError as e:
            logger.error("Failed to read state of %s: %s", root, e)
            raise StorageError("STATE_FAILED", str(e)) from e

        return StateResponse(root=root, limits=self.limits(), images=images, buckets=buckets)

    def next_bucket_name(self, root: str) -> str:
        existing = self.list_buckets(root)
        if not existing:
            return "1"
        return str(max(int(n) for n in existing) + 1)

    def create_bucket(self) -> BucketStats:
        root = self.require_root()
        with self._create_lock:
            try:
                name = self.next_bucket_name(root)
                # No exist_ok: a name collision must fail, never reuse a folder
                os.mkdir(os.path.join(root, name))
                bucket = self.get_bucket_stats(root, name)
            except OSError as e:
                logger.error("Failed to create bucket in %s: %s", root, e)
                raise StorageError("CREATE_BUCKET_FAILED", str(e)) from e

        logger.info("Created bucket %s in %s", name, root)
        return bucket

    def get_root_image_path(self, image_name) -> str:
        """Path of an image that still sits directly in the root folder."""
        root = self.require_root()
        if not is_valid_image_name(image_name):
            raise InvalidNameError("INVALID_IMAGE_NAME", f"Invalid image name: {image_name!r}")

        path = os.path.join(root, image_name)
        try:
            st = os.stat(path)
        except OSError as e:
            raise NotFoundError("IMAGE_NOT_FOUND", f"Image {image_name} not found.") from e
        if not stat.S_ISREG(st.st_mode):
            raise NotFoundError("IMAGE_NOT_FOUND", f"Image {image_name} not found.")
        return path
