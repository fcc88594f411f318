class QcError(Exception):
    """Base application exception."""

    status_code = 500

    def __init__(self, message: str, code: str = "QC_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code


class DuplicateJobNumber(QcError):
    status_code = 409

    def __init__(self, job_number: str):
        super().__init__("A job with this number already exists.", code="DUPLICATE_JOB_NUMBER")
        self.job_number = job_number


class JobNotFound(QcError):
    status_code = 404

    def __init__(self, job_id: str):
        super().__init__(f"Job {job_id} not found", code="JOB_NOT_FOUND")
        self.job_id = job_id


class StoreUnavailable(QcError):
    status_code = 503

    def __init__(self, message: str = "Could not reach the job store"):
        super().__init__(message, code="STORE_UNAVAILABLE")


class AttachmentStoreFailure(QcError):
    status_code = 502

    def __init__(self, message: str):
        super().__init__(message, code="ATTACHMENT_STORE_FAILURE")


class AnnotationServiceFailure(QcError):
    status_code = 502

    def __init__(self, message: str = "Could not analyze the image."):
        super().__init__(message, code="ANNOTATION_SERVICE_FAILURE")


class InvariantViolation(QcError):
    """Raised when a mutation would break the shape of a job's checklist."""

    status_code = 422

    def __init__(self, message: str):
        super().__init__(message, code="INVARIANT_VIOLATION")


class InvalidUpload(QcError):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message, code="INVALID_UPLOAD")
