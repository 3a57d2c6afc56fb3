"""HTTP transport used by Crest resources.

Resources hand a transport the HTTP method, the resource URL and the
processed request options. The transport performs the call and returns a
Result holding either an ``HttpResponse`` or the error, plus request
metadata. Any object implementing ``Transport`` can replace the default
``RequestsTransport``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import requests

from .config import CrestConfig
from .errors import HttpClientError, RequestTimeoutError, RetryableHttpError
from .types import Err, Ok, Result

logger = logging.getLogger(__name__)

BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


@dataclass(frozen=True)
class HttpResponse:
    """Normalized HTTP response.

    Header names are lower-cased. ``data`` holds the decoded JSON body when
    the server sent JSON, ``content`` always holds the body text.
    """

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    data: Any = None
    content: str = ""

    @classmethod
    def from_requests(cls, response: requests.Response) -> HttpResponse:
        headers = {k.lower(): v for k, v in dict(response.headers).items()}
        data = None
        if "json" in headers.get("content-type", ""):
            try:
                data = response.json()
            except ValueError:
                logger.debug("Response declared JSON but body did not decode")
        return cls(
            status_code=response.status_code,
            headers=headers,
            data=data,
            content=response.text,
        )


class Transport(Protocol):
    def call(
        self, method: str, url: str, options: Mapping[str, Any]
    ) -> Result[HttpResponse, Exception]: ...


class RequestsTransport:
    """Default transport backed by a ``requests.Session``.

    Request options are the processed options of a resource: ``headers``,
    ``params``, a serialized ``query`` string and the optional ``data``,
    ``content``, ``auth``, ``timeout`` and ``follow_redirects`` fields.
    """

    def __init__(self, config: CrestConfig) -> None:
        self._config = config
        self._session = requests.Session()
        if self._config.user_agent:
            self._session.headers["User-Agent"] = self._config.user_agent

    def _get_timeout(self, override: float | None) -> float | None:
        """Resolve timeout preference."""
        if override is not None:
            if override <= 0:
                raise ValueError("timeout override must be > 0 when provided")
            return override
        return self._config.timeout_seconds

    @staticmethod
    def _get_auth(auth: Any) -> tuple[str, str] | None:
        if not auth:
            return None
        if isinstance(auth, str):
            if ":" not in auth:
                raise ValueError("auth must be in the form 'username:password'")
            username, password = auth.split(":", 1)
            return username, password
        username, password = auth
        return username, password

    @staticmethod
    def _with_query(url: str, query: str | None) -> str:
        if not query:
            return url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{query}"

    def _build_kwargs(
        self, method: str, options: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Translate processed options into ``requests`` keyword arguments."""
        params = dict(options.get("params") or {})
        kwargs: dict[str, Any] = {
            "headers": dict(options.get("headers") or {}),
            "params": None,
            "timeout": self._get_timeout(options.get("timeout") or None),
            "allow_redirects": bool(options.get("follow_redirects", True)),
            "verify": self._config.verify_tls,
        }

        if "data" in options:
            kwargs["json"] = options["data"]
        elif "content" in options:
            kwargs["data"] = options["content"]

        has_body = "json" in kwargs or "data" in kwargs
        if method in BODY_METHODS and not has_body:
            kwargs["data"] = params or None
        else:
            kwargs["params"] = params or None

        auth = self._get_auth(options.get("auth"))
        if auth is not None:
            kwargs["auth"] = auth
        return kwargs

    def _build_meta(
        self,
        method: str,
        request_url: str,
        response: requests.Response | None,
        timeout: float | None,
        final_error: str | None = None,
    ) -> dict[str, Any]:
        """Construct metadata dictionary from the response."""
        meta: dict[str, Any] = {}
        meta["method"] = method
        meta["url"] = request_url
        meta["timeout_s"] = timeout

        if response is not None:
            meta["status"] = response.status_code
            meta["status_code"] = response.status_code
            meta["url"] = response.url
            meta["reason"] = response.reason
            try:
                meta["elapsed_s"] = response.elapsed.total_seconds()
            except AttributeError:
                pass  # In case elapsed is not available or mocked
        if final_error is not None:
            meta["final_error"] = final_error

        return meta

    def _handle_request_exception(
        self,
        method: str,
        request_url: str,
        e: requests.exceptions.RequestException,
        timeout: float | None,
    ) -> Result[Any, Exception]:
        """Map requests exceptions to Crest transport errors."""
        meta = self._build_meta(
            method,
            request_url,
            e.response,
            timeout,
            final_error=type(e).__name__,
        )
        logger.warning("%s %s failed: %s", method, request_url, e)

        if isinstance(e, requests.exceptions.Timeout):
            return Err(RequestTimeoutError(str(e)), meta=meta)

        if isinstance(e, requests.exceptions.ConnectionError):
            return Err(RetryableHttpError(str(e)), meta=meta)

        return Err(HttpClientError(str(e)), meta=meta)

    def call(
        self, method: str, url: str, options: Mapping[str, Any]
    ) -> Result[HttpResponse, Exception]:
        """Perform one HTTP request.

        Args:
            method: HTTP verb; normalized to upper case.
            url: Resource URL without query string.
            options: Processed request options.

        Returns:
            Result containing the ``HttpResponse`` on success, or an error
            on transport failure. Error statuses (4xx/5xx) are successful
            results; inspect ``status_code``.

        Raises:
            ValueError: If the timeout override or auth value is malformed.
        """
        method = method.upper()
        request_url = self._with_query(url, options.get("query"))
        kwargs = self._build_kwargs(method, options)
        timeout = kwargs["timeout"]

        logger.debug("%s %s", method, request_url)
        try:
            response = self._session.request(method, request_url, **kwargs)
        except requests.exceptions.RequestException as exc:
            return self._handle_request_exception(
                method, request_url, exc, timeout
            )

        return Ok(
            HttpResponse.from_requests(response),
            meta=self._build_meta(method, request_url, response, timeout),
        )

    def close(self) -> None:
        self._session.close()
