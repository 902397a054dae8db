"""
Bookkeeping Backend Client

One method per backend endpoint, nothing more. Every call is an
independent request/response: there is no request queue and no
cancellation, and the only state shared between calls is the auth token
obtained at login.

This client handles:
1. Building request bodies in the backend's camelCase format
2. Attaching the bearer token to authenticated calls
3. Unwrapping the {code, message, data} envelope
4. Mapping `data` into typed models

Only idempotent requests are retried, and only on transport failures.
Login, registration and adding a transaction are sent exactly once.
"""

from functools import lru_cache
from typing import Any, Optional

import requests
import structlog
from pydantic import ValidationError
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from mengmeng_budget.config import ApiSettings, get_settings
from mengmeng_budget.models.envelope import ApiEnvelope
from mengmeng_budget.models.transaction import (
    HomeSummary,
    NewTransaction,
    SummaryQuery,
    Transaction,
    TransactionQuery,
)


BEARER_PREFIX = "Bearer "

# Keys under which paged endpoints may nest their items
PAGE_ITEM_KEYS = ("list", "records", "rows", "content", "items")


class ApiError(Exception):
    """Base exception for backend API errors."""
    pass


class NetworkError(ApiError):
    """The request never produced an HTTP response (DNS, refused, timeout)."""
    pass


class ResponseFormatError(ApiError):
    """The response body is not the expected envelope or data shape."""
    pass


class NotAuthenticatedError(ApiError):
    """An authenticated endpoint was called before login."""

    def __init__(self, message: str = "Not logged in, please log in first"):
        super().__init__(message)


class ApiResponseError(ApiError):
    """The backend answered with a non-success code."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class BudgetApiClient:
    """
    HTTP client for the MengMeng Budget backend.

    IMPORTANT BOUNDARIES:
    1. This client does NOT interpret data beyond typing it
    2. Failures are raised, never returned as sentinel values
    3. Passwords, tokens and bodies are never logged
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().api
        self._session = session or requests.Session()
        self._auth_token: Optional[str] = None
        self._logger = structlog.get_logger(__name__)

    # -------------------------------------------------------------------------
    # Token state
    # -------------------------------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        """The stored token, always with its "Bearer " prefix."""
        return self._auth_token

    @property
    def is_logged_in(self) -> bool:
        return bool(self._auth_token)

    def set_token(self, token: str) -> str:
        """Store a token, adding the "Bearer " prefix if the backend omitted it."""
        token = token.strip()
        if not token.startswith(BEARER_PREFIX):
            token = f"{BEARER_PREFIX}{token}"
        self._auth_token = token
        return token

    def clear_token(self) -> None:
        self._auth_token = None

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self._settings.base_url}{path}"

    def _headers(self, authenticated: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if authenticated:
            if not self.is_logged_in:
                raise NotAuthenticatedError()
            headers["Authorization"] = self._auth_token
        return headers

    def _send_once(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: Optional[dict],
    ) -> requests.Response:
        self._logger.debug("api_request", method=method, path=path)
        try:
            response = self._session.request(
                method,
                self._url(path),
                json=body,
                headers=headers,
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as e:
            raise NetworkError(f"Network request failed: {e}") from e

        self._logger.debug(
            "api_response",
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        self._logger.warning(
            "api_retry",
            attempt=retry_state.attempt_number,
            error=str(exc),
        )

    def _send(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        authenticated: bool = True,
        idempotent: bool = False,
    ) -> requests.Response:
        # Raises before any I/O when the token is missing
        headers = self._headers(authenticated)

        if not idempotent:
            return self._send_once(method, path, headers, body)

        retrying = Retrying(
            stop=stop_after_attempt(self._settings.max_retries),
            wait=wait_exponential(multiplier=self._settings.retry_backoff_seconds, max=10),
            retry=retry_if_exception_type(NetworkError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return retrying(self._send_once, method, path, headers, body)

    def _unwrap(self, response: requests.Response, default_message: str) -> ApiEnvelope:
        """
        Validate the envelope and return it if `code` is 200.

        The HTTP status only matters when the body is not an envelope.
        """
        try:
            payload = response.json()
        except ValueError:
            payload = None

        envelope = None
        if isinstance(payload, dict):
            try:
                envelope = ApiEnvelope.model_validate(payload)
            except ValidationError:
                envelope = None

        if envelope is None:
            if response.status_code >= 400:
                raise ApiResponseError(
                    response.status_code,
                    f"{default_message} (HTTP {response.status_code})",
                )
            raise ResponseFormatError("Unexpected response format")

        if not envelope.ok:
            self._logger.info(
                "api_rejected",
                code=envelope.code,
                message=envelope.message,
            )
            raise ApiResponseError(envelope.code, envelope.message or default_message)

        return envelope

    def _call(
        self,
        method: str,
        path: str,
        default_message: str,
        body: Optional[dict] = None,
        authenticated: bool = True,
        idempotent: bool = False,
    ) -> Any:
        """Send a request and return the envelope's `data`."""
        response = self._send(
            method,
            path,
            body=body,
            authenticated=authenticated,
            idempotent=idempotent,
        )
        return self._unwrap(response, default_message).data

    # -------------------------------------------------------------------------
    # Data mapping
    # -------------------------------------------------------------------------

    def _page_items(self, data: Any) -> list:
        if data is None:
            return []
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in PAGE_ITEM_KEYS:
                items = data.get(key)
                if isinstance(items, list):
                    return items
        raise ResponseFormatError("Transaction list has an unexpected shape")

    def _to_transactions(self, data: Any) -> list[Transaction]:
        try:
            return [Transaction.model_validate(item) for item in self._page_items(data)]
        except ValidationError as e:
            raise ResponseFormatError(f"Malformed transaction in response: {e}") from e

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def register(self, user_id: str, username: str, password: str) -> None:
        """
        Create a new account.

        Raises:
            ApiResponseError: If the backend refuses (e.g. ID taken)
            NetworkError: If the backend is unreachable
        """
        self._call(
            "POST",
            "/auth/register",
            "Registration failed",
            body={"id": user_id, "username": username, "password": password},
            authenticated=False,
        )
        self._logger.info("registered", user_id=user_id)

    def login(self, user_id: str, password: str) -> str:
        """
        Log in and keep the returned token for later calls.

        The backend identifies users by ID, which is also sent as the
        username.

        Returns:
            The stored token (with "Bearer " prefix)
        """
        data = self._call(
            "POST",
            "/auth/login",
            "Login failed",
            body={"id": user_id, "username": user_id, "password": password},
            authenticated=False,
        )

        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token.strip():
            raise ApiResponseError(200, "Login failed: no token in response")

        self._logger.info("logged_in", user_id=user_id)
        return self.set_token(token)

    def logout(self) -> None:
        """Forget the token. The backend keeps no session to close."""
        self.clear_token()

    def generate_family_code(self) -> str:
        """Ask the backend for a share code other users can join with."""
        data = self._call(
            "GET",
            "/auth/generate-family",
            "Failed to generate family code",
            idempotent=True,
        )
        if isinstance(data, bool) or not isinstance(data, (str, int)) or data == "":
            raise ResponseFormatError("Family code missing from response")
        return str(data)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def get_home_summary(self, query: Optional[SummaryQuery] = None) -> HomeSummary:
        """
        Load the income / balance / expense triple.

        Without a query this is the unfiltered home-screen summary (GET).
        With a query it is scoped to a month, type and category (POST).
        """
        if query is None:
            data = self._call(
                "GET",
                "/transactions/home-summary",
                "Failed to load summary",
                idempotent=True,
            )
        else:
            data = self._call(
                "POST",
                "/transactions/home-summary",
                "Failed to load summary",
                body=query.to_body(),
                idempotent=True,
            )

        if not isinstance(data, dict):
            raise ResponseFormatError("Summary data is not an object")
        return HomeSummary.model_validate(data)

    def get_recent_transactions(self) -> list[Transaction]:
        """Latest transactions for the home screen."""
        data = self._call(
            "GET",
            "/transactions/home-rencent",
            "Failed to load recent transactions",
            idempotent=True,
        )
        return self._to_transactions(data)

    def get_all_transactions(self, query: TransactionQuery) -> list[Transaction]:
        """Load one page of the filtered transaction list."""
        data = self._call(
            "POST",
            "/transactions/home-all",
            "Failed to load transactions",
            body=query.to_body(),
            idempotent=True,
        )
        return self._to_transactions(data)

    def add_transaction(self, new: NewTransaction) -> Transaction:
        """
        Create a transaction.

        Returns the backend's echo when it sends a full transaction back,
        otherwise the submitted values under the server-assigned ID.
        """
        data = self._call(
            "POST",
            "/transactions/add",
            "Failed to add transaction",
            body=new.to_body(),
        )

        if isinstance(data, dict):
            try:
                return Transaction.model_validate(data)
            except ValidationError:
                self._logger.debug("add_echo_partial", keys=sorted(data))

        fields = new.model_dump()
        server_id = data.get("id") if isinstance(data, dict) else data
        if isinstance(server_id, (str, int)) and not isinstance(server_id, bool) and server_id != "":
            fields["id"] = str(server_id)
        return Transaction(**fields)


@lru_cache()
def get_client() -> BudgetApiClient:
    """
    Process-wide shared client (cached).

    The token lives on this instance, so every screen sees the same
    login state.
    """
    return BudgetApiClient()
