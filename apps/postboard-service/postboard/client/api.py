"""
HTTP client for the posts procedures.

One method per procedure. Error responses are raised as
:class:`ProcedureError` carrying the server's error code; transport errors
from the underlying session propagate unchanged.
"""
import logging
from typing import Any, Dict, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10.0

_CODE_BY_STATUS = {
    401: "UNAUTHENTICATED",
    404: "NOT_FOUND",
    422: "VALIDATION",
    500: "STORAGE_FAILURE",
}


class ProcedureError(Exception):
    """Raised when a procedure call returns an error response."""

    def __init__(self, code: str, message: Any, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{code}: {message}")


class PostsApi:
    """Calls the posts procedures over HTTP.

    ``http`` may be any requests-compatible session object exposing
    ``request(method, url, params=..., json=..., headers=..., timeout=...)``;
    a plain ``requests.Session`` is created when omitted.
    """

    def __init__(
        self,
        base_url: str = "",
        http=None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.headers: Dict[str, str] = dict(headers or {})
        self.timeout = timeout

    def with_session_token(self, token: str) -> "PostsApi":
        headers = {**self.headers, "Authorization": f"Bearer {token}"}
        return PostsApi(self.base_url, http=self.http, headers=headers, timeout=self.timeout)

    def _call(self, method: str, path: str, *, params=None, json=None) -> Any:
        response = self.http.request(
            method,
            f"{self.base_url}{path}",
            params=params,
            json=json,
            headers=self.headers,
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            code = body.get("code") or _CODE_BY_STATUS.get(response.status_code, "UNKNOWN")
            detail = body.get("detail") or response.text
            logger.debug("procedure_error: %s %s -> %s %s", method, path, response.status_code, code)
            raise ProcedureError(code, detail, response.status_code)
        return response.json()

    # posts.getAll
    def get_all(self, page: Optional[int] = None, page_size: Optional[int] = None, q: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if page is not None:
            params["page"] = page
        if page_size is not None:
            params["pageSize"] = page_size
        if q:
            params["q"] = q
        return self._call("GET", "/posts/", params=params)

    # posts.getOne
    def get_one(self, post_id: str) -> Dict[str, Any]:
        return self._call("GET", f"/posts/{post_id}")

    # posts.create
    def create(self, title: Optional[str] = None, content: Optional[str] = None) -> Dict[str, Any]:
        body = {k: v for k, v in (("title", title), ("content", content)) if v is not None}
        return self._call("POST", "/posts/", json=body)

    # posts.update
    def update(self, post_id: str, title: Optional[str] = None, content: Optional[str] = None) -> Dict[str, Any]:
        body = {k: v for k, v in (("title", title), ("content", content)) if v is not None}
        return self._call("PUT", f"/posts/{post_id}", json=body)

    # posts.remove
    def remove(self, post_id: str) -> Dict[str, Any]:
        return self._call("DELETE", f"/posts/{post_id}")

    def open_session(self) -> Dict[str, Any]:
        return self._call("POST", "/sessions")

    def close_session(self) -> Dict[str, Any]:
        return self._call("DELETE", "/sessions/current")
