"""HTTP client shared by the Nakadi sub APIs."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Collection
from types import TracebackType

import httpx

from nakadi.config import ClientOptions
from nakadi.core.backoff import BackoffPolicy, retry
from nakadi.errors import DecodeError, RemoteError, TransportError, remote_error_for_status
from nakadi.models.event_type import Problem

logger = logging.getLogger(__name__)

type JSONValue = None | bool | int | float | str | list[JSONValue] | dict[str, JSONValue]
type JSONObject = dict[str, JSONValue]


class Client:
    """Connection to one Nakadi service.

    The client owns the ``httpx.Client`` it creates and closes it in
    :meth:`close`. A client passed in by the caller is left open.
    """

    def __init__(
        self,
        nakadi_url: str,
        options: ClientOptions | None = None,
        *,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not nakadi_url.strip():
            msg = "nakadi_url must not be empty"
            raise ValueError(msg)
        self.nakadi_url = nakadi_url.strip().rstrip("/")
        self._options = options or ClientOptions()
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(timeout=self._options.connection_timeout)
        self._sleep = sleep

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def get_json(self, policy: BackoffPolicy, url: str, *, context: str) -> JSONValue:
        """GET ``url`` expecting 200 and return the decoded body."""
        response = self._send(policy, "GET", url, context=context, expected={200})
        try:
            return response.json()
        except ValueError as exc:
            msg = f"{context}: unable to decode response body: {exc}"
            raise DecodeError(msg) from exc

    def post_json(
        self,
        policy: BackoffPolicy,
        url: str,
        payload: JSONObject,
        *,
        context: str,
        expected: Collection[int] = (201,),
    ) -> httpx.Response:
        return self._send(policy, "POST", url, context=context, expected=expected, payload=payload)

    def put_json(
        self,
        policy: BackoffPolicy,
        url: str,
        payload: JSONObject,
        *,
        context: str,
        expected: Collection[int] = (200,),
    ) -> httpx.Response:
        return self._send(policy, "PUT", url, context=context, expected=expected, payload=payload)

    def delete(
        self,
        policy: BackoffPolicy,
        url: str,
        *,
        context: str,
        expected: Collection[int] = (200, 204),
    ) -> httpx.Response:
        return self._send(policy, "DELETE", url, context=context, expected=expected)

    def _send(
        self,
        policy: BackoffPolicy,
        method: str,
        url: str,
        *,
        context: str,
        expected: Collection[int],
        payload: JSONObject | None = None,
    ) -> httpx.Response:
        def attempt() -> httpx.Response:
            response = self._round_trip(method, url, payload, context=context)
            if response.status_code not in expected:
                raise self._remote_error(response, context=context)
            return response

        return retry(attempt, policy, sleep=self._sleep, description=f"{method} {url}")

    def _round_trip(
        self,
        method: str,
        url: str,
        payload: JSONObject | None,
        *,
        context: str,
    ) -> httpx.Response:
        headers = {"Accept": "application/json", **self._auth_headers(context)}
        logger.debug("%s %s", method, url)
        try:
            response = self._http.request(method, url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            msg = f"{context}: request timed out: {exc}"
            raise TransportError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"{context}: {exc}"
            raise TransportError(msg) from exc
        logger.debug("%s %s -> %d", method, url, response.status_code)
        return response

    def _auth_headers(self, context: str) -> dict[str, str]:
        provider = self._options.token_provider
        if provider is None:
            return {}
        try:
            token = provider()
        except Exception as exc:
            msg = f"{context}: unable to obtain access token: {exc}"
            raise TransportError(msg) from exc
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _remote_error(response: httpx.Response, *, context: str) -> RemoteError:
        problem: Problem | None
        try:
            problem = Problem.model_validate(response.json())
            detail = problem.detail or problem.title or ""
        except ValueError:
            problem = None
            detail = response.text.strip()[:200]
        if not detail:
            detail = f"http status {response.status_code}"
        return remote_error_for_status(
            f"{context}: {detail}",
            status_code=response.status_code,
            detail=detail,
            problem=problem,
        )
