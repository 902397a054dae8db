"""Backend API client package."""

from mengmeng_budget.services.api.client import (
    ApiError,
    ApiResponseError,
    BudgetApiClient,
    NetworkError,
    NotAuthenticatedError,
    ResponseFormatError,
    get_client,
)

__all__ = [
    "ApiError",
    "ApiResponseError",
    "BudgetApiClient",
    "NetworkError",
    "NotAuthenticatedError",
    "ResponseFormatError",
    "get_client",
]
