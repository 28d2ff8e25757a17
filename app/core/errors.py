# app/core/errors.py
from fastapi import status


class BucketError(Exception):
    """Base error for the sorter. Carries a machine-readable code and the HTTP status it maps to."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, code: str, message: str = None):
        super().__init__(message or code)
        self.code = code
        self.message = message or code

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class ConfigurationError(BucketError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidNameError(BucketError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(BucketError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(BucketError):
    status_code = status.HTTP_409_CONFLICT


class StorageError(BucketError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


ROOT_NOT_SET_MESSAGE = (
    "Set IMAGE_ROOT to the folder containing your images (e.g. /home/me/Pictures/to-sort)."
)


def root_not_set() -> ConfigurationError:
    return ConfigurationError("IMAGE_ROOT_NOT_SET", ROOT_NOT_SET_MESSAGE)
