"""Services package."""

from mengmeng_budget.services.api import (
    ApiError,
    ApiResponseError,
    BudgetApiClient,
    NetworkError,
    NotAuthenticatedError,
    ResponseFormatError,
    get_client,
)

__all__ = [
    # Backend API
    "ApiError",
    "ApiResponseError",
    "BudgetApiClient",
    "NetworkError",
    "NotAuthenticatedError",
    "ResponseFormatError",
    "get_client",
]
