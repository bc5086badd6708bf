class UploadError(Exception):
    """Base class for errors that end an upload request with a JSON failure body."""

    status_code = 500
    message = "upload failed"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthorizationMismatch(UploadError):
    """The pin code did not match the shared secret."""

    status_code = 401
    message = "incorrect security code"


class NoFileProvided(UploadError):
    status_code = 400
    message = "no file sent"


class PayloadTooLarge(UploadError):
    status_code = 413
    message = "file too large"


class TooManyAttempts(UploadError):
    status_code = 429
    message = "too many failed attempts"


class StorageUnavailable(UploadError):
    """The upload directory could not be created or written to."""

    status_code = 500
    message = "storage unavailable"
