import errno
import logging
import os
import shutil
import stat
import threading
from contextlib import contextmanager

from app.core.errors import (
    BucketError,
    ConflictError,
    InvalidNameError,
    NotFoundError,
    StorageError,
)
from app.core.naming import format_bytes, is_bucket_name, is_valid_image_name
from app.schemas.bucket_schemas import MoveImageResponse
from app.services.bucket_state_services import BucketStateService

logger = logging.getLogger(__name__)

COPY_CHUNK_SIZE = 1024 * 1024

# Filesystems without hard links (FAT, exFAT, some network mounts) answer with one of these
_NO_HARDLINK_ERRNOS = frozenset(
    getattr(errno, name) for name in ("EPERM", "ENOTSUP", "EOPNOTSUPP", "ENOSYS", "EMLINK")
    if hasattr(errno, name)
)


def move_file_safe(src: str, dest: str) -> None:
    """
    Move src to dest without ever replacing an existing dest.

    Hard-link then unlink, so a dest that appears after the caller's checks
    raises FileExistsError. Without hard-link support this falls back to a
    plain rename; across devices, to copy then delete.
    """
    try:
        os.link(src, dest)
    except FileExistsError:
        raise
    except OSError as e:
        if e.errno == errno.EXDEV:
            logger.info("Cross-device move, copying %s -> %s", src, dest)
            copy_then_unlink(src, dest)
            return
        if e.errno not in _NO_HARDLINK_ERRNOS:
            raise
        logger.info("Hard links unsupported for %s, renaming", src)
        _rename(src, dest)
        return

    try:
        os.unlink(src)
    except OSError:
        _discard_copy(dest)
        raise


def _rename(src: str, dest: str) -> None:
    try:
        os.rename(src, dest)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        logger.info("Cross-device move, copying %s -> %s", src, dest)
        copy_then_unlink(src, dest)


def copy_then_unlink(src: str, dest: str) -> None:
    """
    Copy src to a new file at dest and only then delete src.
    Any failure, including failing to delete src, removes dest and leaves src in place.
    """
    expected = os.stat(src).st_size
    created = False
    try:
        with open(src, "rb") as fsrc:
            with open(dest, "xb") as fdst:
                created = True
                shutil.copyfileobj(fsrc, fdst, COPY_CHUNK_SIZE)
                fdst.flush()
                os.fsync(fdst.fileno())
        shutil.copystat(src, dest)

        copied = os.stat(dest).st_size
        if copied != expected:
            raise OSError(errno.EIO, f"Incomplete copy: {copied} of {expected} bytes written", dest)

        os.unlink(src)
    except Exception:
        if created:
            _discard_copy(dest)
        raise


def _discard_copy(dest: str) -> None:
    try:
        os.unlink(dest)
    except OSError as e:
        logger.error("Could not remove copy %s: %s", dest, e)


class MoveService:
    def __init__(self, state_service: BucketStateService):
        self.state = state_service
        self.settings = state_service.settings
        # bucket name -> [lock, number of requests holding or waiting on it]
        self._locks = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _bucket_lock(self, bucket_name: str):
        with self._locks_guard:
            entry = self._locks.get(bucket_name)
            if entry is None:
                entry = self._locks[bucket_name] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[bucket_name]

    def move_image(self, image_name, bucket_name) -> MoveImageResponse:
        root = self.state.require_root()

        if not is_valid_image_name(image_name):
            raise InvalidNameError("INVALID_IMAGE_NAME", f"Invalid image name: {image_name!r}")
        if not is_bucket_name(bucket_name):
            raise InvalidNameError("INVALID_BUCKET_NAME", f"Invalid bucket name: {bucket_name!r}")

        # Serializes check-then-move per bucket within this process only
        with self._bucket_lock(bucket_name):
            try:
                return self._move_locked(root, image_name, bucket_name)
            except BucketError as e:
                logger.warning("Move of %s to bucket %s refused: %s", image_name, bucket_name, e.code)
                raise
            except OSError as e:
                logger.error("Move of %s to bucket %s failed: %s", image_name, bucket_name, e)
                raise StorageError("MOVE_FAILED", str(e)) from e

    def _move_locked(self, root: str, image_name: str, bucket_name: str) -> MoveImageResponse:
        src = os.path.join(root, image_name)
        bucket_path = os.path.join(root, bucket_name)
        dest = os.path.join(bucket_path, image_name)

        if not os.path.isdir(bucket_path):
            raise NotFoundError("BUCKET_NOT_FOUND", f"Bucket {bucket_name} not found.")

        try:
            src_stat = os.stat(src)
        except FileNotFoundError as e:
            raise NotFoundError("IMAGE_NOT_FOUND", f"Image {image_name} not found.") from e
        if not stat.S_ISREG(src_stat.st_mode):
            raise NotFoundError("IMAGE_NOT_FOUND", f"Image {image_name} not found.")
        if os.path.lexists(dest):
            raise ConflictError(
                "DEST_ALREADY_EXISTS",
                "A file with the same name already exists in that bucket.",
            )

        # Fresh numbers, never the snapshot the client rendered from
        current = self.state.get_bucket_stats(root, bucket_name)
        max_photos = self.settings.MAX_BUCKET_PHOTOS
        max_bytes = self.settings.MAX_BUCKET_BYTES

        if current.photo_count + 1 > max_photos:
            raise ConflictError(
                "BUCKET_FULL_PHOTOS",
                f"Bucket {bucket_name} cannot exceed {max_photos} photos.",
            )
        if current.total_bytes + src_stat.st_size > max_bytes:
            raise ConflictError(
                "BUCKET_FULL_BYTES",
                f"Bucket {bucket_name} cannot exceed {format_bytes(max_bytes)}.",
            )

        try:
            move_file_safe(src, dest)
        except FileExistsError as e:
            raise ConflictError(
                "DEST_ALREADY_EXISTS",
                "A file with the same name already exists in that bucket.",
            ) from e
        logger.info("Moved %s to bucket %s", image_name, bucket_name)

        return MoveImageResponse(
            ok=True,
            bucket=self.state.get_bucket_stats(root, bucket_name),
            removed=image_name,
        )
