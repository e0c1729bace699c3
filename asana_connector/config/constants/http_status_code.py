from enum import Enum


class HttpStatusCode(Enum):
    """Constants for HTTP status codes"""

    # 4xx Client Errors
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    TOO_MANY_REQUESTS = 429


SUCCESS_CODE_IS_LESS_THAN = 400
