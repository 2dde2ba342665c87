"""
Resilient channel to the remote meal service.

Every request goes through ``ResilientChannel.execute``:

    channel = ResilientChannel(base_url, token_store, failure_observer=toast)
    menu = await channel.execute(RequestSpec(method="GET", path="/menu", params={...}))

The channel attaches the bearer token, enforces the request timeout,
classifies failures, retries the retryable ones under its ``RetryPolicy``,
and unwraps the service envelope ``{success, data, error, message}``.

Attempt counting lives inside each ``execute`` call, so one channel can
serve any number of concurrent requests.
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict

from flightmeals.core.errors import ChannelError, RejectedError
from flightmeals.services.auth.token_store import TokenStore
from flightmeals.services.channel.classifier import TransportFailure, classify
from flightmeals.services.channel.policy import RetryPolicy

logger = logging.getLogger(__name__)


# Plain callables and coroutine functions are both accepted; coroutines are awaited.
FailureObserver = Callable[[str], Union[None, Awaitable[None]]]


def log_failure(message: str) -> None:
    """Default failure observer: write the message to the log."""
    logger.warning(f"[CHANNEL] Request failed: {message}")


class RequestSpec(BaseModel):
    """One logical request against the meal service."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    params: Optional[Dict[str, Any]] = None
    body: Optional[Dict[str, Any]] = None
    authenticated: bool = True
    expects_data: bool = True
    failure_message: str = "Request failed"

    def query_params(self) -> Optional[Dict[str, Any]]:
        """Query parameters with unset values dropped."""
        if not self.params:
            return None
        return {key: value for key, value in self.params.items() if value is not None}

    def describe(self) -> str:
        return f"{self.method.upper()} {self.path}"


class ResilientChannel:
    """Request/response exchange with auth, timeout, retry and classification."""

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        policy: Optional[RetryPolicy] = None,
        timeout: float = 10.0,
        failure_observer: Optional[FailureObserver] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the channel.

        Args:
            base_url: Meal service base URL, e.g. http://localhost:3001/api
            token_store: Where the login flow keeps the bearer token
            policy: Retry policy (defaults to 3 attempts, no backoff)
            timeout: Per-attempt timeout in seconds
            failure_observer: Called with the message of every final failure
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.token_store = token_store
        self.policy = policy or RetryPolicy()
        self.timeout = timeout
        self.failure_observer = failure_observer or log_failure
        self._sleep = asyncio.sleep
        # Create a single httpx client instance for reuse
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def execute(self, spec: RequestSpec, is_abandoned: Optional[Callable[[], bool]] = None) -> Any:
        """
        Run one logical request, retrying retryable failures.

        ``is_abandoned`` is checked when the request finally fails; a caller that
        no longer wants the result gets the error without the observer being told.

        Returns:
            The ``data`` portion of the service envelope

        Raises:
            ChannelError: Transport failure after the policy gave up
            RejectedError: Service answered success:false
        """
        attempts = 0
        while True:
            attempts += 1
            try:
                response = await self._send(spec)
                return self._unwrap(spec, response)
            except ChannelError as error:
                if self.policy.allows_retry(error, attempts):
                    delay = self.policy.delay_before(attempts)
                    logger.info(
                        f"[CHANNEL] Retrying {spec.describe()} after {error.kind} "
                        f"(attempt {attempts + 1}/{self.policy.max_attempts}, delay {delay:.2f}s)"
                    )
                    if delay > 0:
                        await self._sleep(delay)
                    continue
                logger.error(
                    f"[CHANNEL] {spec.describe()} failed after {attempts} attempt(s) - "
                    f"kind: {error.kind}, details: {error.details}"
                )
                await self._notify(spec, error.message, is_abandoned)
                raise
            except RejectedError as error:
                logger.warning(f"[CHANNEL] {spec.describe()} rejected by service: {error.message}")
                await self._notify(spec, error.message, is_abandoned)
                raise

    async def _send(self, spec: RequestSpec) -> httpx.Response:
        headers = {}
        if spec.authenticated:
            token = self.token_store.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"

        logger.debug(f"[CHANNEL] {spec.describe()} params={spec.query_params()}")
        try:
            return await self._client.request(
                spec.method,
                spec.path,
                params=spec.query_params(),
                json=spec.body,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            failure = TransportFailure(timed_out=True, detail=f"{type(e).__name__}: {e}")
            raise classify(failure).to_exception() from e
        except httpx.TransportError as e:
            failure = TransportFailure(connection_failed=True, detail=f"{type(e).__name__}: {e}")
            raise classify(failure).to_exception() from e
        except httpx.RequestError as e:
            failure = TransportFailure(detail=f"{type(e).__name__}: {e}")
            raise classify(failure).to_exception() from e

    def _unwrap(self, spec: RequestSpec, response: httpx.Response) -> Any:
        body = self._json_body(response)

        if not response.is_success:
            failure = TransportFailure(
                status_code=response.status_code,
                body=body,
                detail=f"{spec.describe()} -> {response.status_code}",
            )
            raise classify(failure).to_exception()

        if body is None:
            failure = TransportFailure(
                status_code=response.status_code,
                detail=f"{spec.describe()} returned a non-envelope body",
            )
            raise classify(failure).to_exception()

        if body.get("success") is not True or (spec.expects_data and body.get("data") is None):
            error_text = body.get("error")
            message = error_text if isinstance(error_text, str) and error_text else spec.failure_message
            raise RejectedError(message, {"request": spec.describe(), "envelope": body})

        return body.get("data")

    @staticmethod
    def _json_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None

    async def _notify(
        self, spec: RequestSpec, message: str, is_abandoned: Optional[Callable[[], bool]]
    ) -> None:
        if is_abandoned is not None and is_abandoned():
            logger.info(f"[CHANNEL] {spec.describe()} failed after being abandoned - not reported")
            return
        try:
            result = self.failure_observer(message)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("[CHANNEL] Failure observer raised")

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "ResilientChannel":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
