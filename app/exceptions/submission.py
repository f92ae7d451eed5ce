"""Submission workflow exceptions."""

from .base import BaseAppException, NotFoundError


class SubmissionNotFoundError(NotFoundError):
    """Raised when a submission is not found."""

    def __init__(self, message: str = "Submission not found"):
        super().__init__(message=message, error_code="SUBMISSION_NOT_FOUND")


class SubmissionAlreadyProcessedError(BaseAppException):
    """Raised when approving or rejecting a submission that is no longer pending."""

    def __init__(self, message: str = "Submission already processed"):
        super().__init__(
            message=message, status_code=400, error_code="SUBMISSION_ALREADY_PROCESSED"
        )
