"""
Domain Exceptions

Every exception raised across a service boundary derives from
PostcastError. The API layer maps `status_code` and `error_code`
onto the JSON error response.
"""

from typing import Any, Dict, Optional

from fastapi import status


class PostcastError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "error_code": self.error_code}


# =============================================================================
# NotFound
# =============================================================================

class NotFoundError(PostcastError):
    """Resource missing, inactive, or owned by another user."""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"


class FeedNotFoundError(NotFoundError):
    error_code = "FEED_NOT_FOUND"

    def __init__(self, feed_id: str, user_id: Optional[str] = None):
        super().__init__(
            f"Personalized feed {feed_id} not found",
            feed_id=feed_id,
            user_id=user_id,
        )
        self.feed_id = feed_id


class UserNotFoundError(NotFoundError):
    error_code = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found", user_id=user_id)
        self.user_id = user_id


class ProgramNotFoundError(NotFoundError):
    error_code = "PROGRAM_NOT_FOUND"

    def __init__(self, program_id: str, user_id: Optional[str] = None):
        super().__init__(
            f"Personalized program {program_id} not found",
            program_id=program_id,
            user_id=user_id,
        )
        self.program_id = program_id


# =============================================================================
# LimitExceeded
# =============================================================================

class LimitExceededError(PostcastError):
    """The request would exceed the user's subscription quotas."""
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "LIMIT_EXCEEDED"


class SubscriptionInactiveError(LimitExceededError):
    error_code = "SUBSCRIPTION_INACTIVE"


class FeedCountExceededError(LimitExceededError):
    error_code = "FEED_COUNT_EXCEEDED"


class TagCountExceededError(LimitExceededError):
    error_code = "TAG_COUNT_EXCEEDED"


class AuthorCountExceededError(LimitExceededError):
    error_code = "AUTHOR_COUNT_EXCEEDED"


# =============================================================================
# Validation
# =============================================================================

class ValidationError(PostcastError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class FilterValidationError(ValidationError):
    error_code = "FILTER_VALIDATION_ERROR"


class RssNotEnabledError(ValidationError):
    error_code = "RSS_NOT_ENABLED"


class SlackWebhookValidationError(ValidationError):
    error_code = "INVALID_SLACK_WEBHOOK_URL"


# =============================================================================
# Identity provider webhooks
# =============================================================================

class WebhookSignatureError(PostcastError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "INVALID_WEBHOOK_SIGNATURE"


class UserProvisioningError(PostcastError):
    """A user event could not be applied; the sender will retry."""
    error_code = "USER_PROVISIONING_FAILED"


# =============================================================================
# Transient I/O
# =============================================================================

class TransientIOError(PostcastError):
    """An external dependency failed; the request may be retried."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "SERVICE_UNAVAILABLE"


class StorageError(TransientIOError):
    error_code = "STORAGE_ERROR"


class QiitaApiError(TransientIOError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "QIITA_API_ERROR"


class SlackWebhookTestError(TransientIOError):
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "SLACK_WEBHOOK_TEST_ERROR"


# =============================================================================
# Partial lifecycle failures (logged by the RSS coordinator, never surfaced)
# =============================================================================

class RssGenerationError(PostcastError):
    error_code = "RSS_GENERATION_ERROR"


class RssUploadError(StorageError):
    error_code = "RSS_UPLOAD_ERROR"
