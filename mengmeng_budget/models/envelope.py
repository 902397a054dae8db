"""Response envelope shared by every backend endpoint."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, StrictInt


SUCCESS_CODE = 200


class ApiEnvelope(BaseModel):
    """
    The `{code, message, data}` wrapper around every response body.

    `code` is the backend's own status and is independent of the
    HTTP status line; only 200 means success.
    """
    model_config = ConfigDict(extra="ignore")

    code: StrictInt
    message: Optional[str] = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS_CODE
