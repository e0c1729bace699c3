from typing import Optional


class AsanaConnectorError(Exception):
    """Base exception for Asana connector errors"""

    def __init__(self, message: str, details: dict = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ResponseDecodeError(AsanaConnectorError):
    """Raised when an Asana response body cannot be decoded"""


class AsanaAPIError(AsanaConnectorError):
    """Raised when Asana answers with a non-success HTTP status"""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        details: dict = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.url = url


class AuthorizationError(AsanaAPIError):
    """401: the token is missing, expired or invalid"""


class PermissionDeniedError(AsanaAPIError):
    """403: the token is valid but not allowed to perform the call"""


class NotFoundError(AsanaAPIError):
    """404: the object does not exist or is not visible to the token"""


class RateLimitError(AsanaAPIError):
    """429: too many requests"""

    def __init__(
        self,
        message: str,
        status_code: int,
        url: Optional[str] = None,
        details: dict = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message, status_code, url, details)
        self.retry_after = retry_after


class ResourceValidationError(AsanaConnectorError):
    """Raised when a resource, profile or identifier is malformed"""


class UnsupportedRoleError(ResourceValidationError):
    """Raised when a role cannot be granted through the API"""

    def __init__(self, message: str, role: str, details: dict = None) -> None:
        super().__init__(message, details)
        self.role = role


class PageTokenDecodeError(ResourceValidationError):
    """Raised when a continuation token cannot be parsed"""


class NotImplementedForResourceTypeError(AsanaConnectorError):
    """Raised when an operation is invoked for an unexpected resource type"""

    def __init__(self, operation: str, resource_type: str) -> None:
        super().__init__(
            f"asana-connector: {operation} not implemented for resource type {resource_type}",
            {"operation": operation, "resource_type": resource_type},
        )
        self.operation = operation
        self.resource_type = resource_type


class AuthenticationError(AsanaConnectorError):
    """Raised when the connector cannot authenticate against Asana"""


class PaginationLimitError(AsanaConnectorError):
    """Raised when a listing keeps returning a next page past the page cap"""

    def __init__(self, label: str, max_pages: int) -> None:
        super().__init__(
            f"{label}: gave up after {max_pages} pages",
            {"listing": label, "max_pages": max_pages},
        )
