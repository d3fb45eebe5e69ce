"""
Client for the survey HTTP API.

Wraps submission and analytics reads behind a uniform retry policy, keeps
per-operation loading and error state, caches the last analytics values
and turns every failure into a user-facing message.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel

from nps_survey.client.retry import RetryPolicy, RetryRun
from nps_survey.domains import (
    ApiError,
    ErrorCategory,
    NetworkError,
    SurveyCreated,
    SurveyError,
    SurveyRequest,
    SurveyValidationError,
    UnexpectedError,
)
from nps_survey.guardrails.sanitizer import sanitize_email, sanitize_text
from nps_survey.guardrails.validation import SurveyValidator

logger = logging.getLogger(__name__)

FRIENDLY_MESSAGES = {
    ErrorCategory.NETWORK: "Unable to connect to the server. Please check your internet connection and try again.",
    ErrorCategory.BAD_REQUEST: "Invalid data submitted. Please check your input and try again.",
    ErrorCategory.UNPROCESSABLE: "The submitted data could not be processed. Please review your input.",
    ErrorCategory.SERVER: "Server error occurred. Our team has been notified. Please try again later.",
    ErrorCategory.FORBIDDEN: "You do not have permission to perform this action.",
    ErrorCategory.NOT_FOUND: "The requested resource was not found.",
    ErrorCategory.UNKNOWN: "An unexpected error occurred. Please try again.",
}

SUBMIT = "submit"
NPS = "nps"
AVERAGE = "average"
DISTRIBUTION = "distribution"


def friendly_message(error: BaseException) -> str:
    """Map any error to one of the fixed user-facing messages."""
    category = getattr(error, "category", ErrorCategory.UNKNOWN)
    if not isinstance(category, ErrorCategory):
        category = ErrorCategory.UNKNOWN
    return FRIENDLY_MESSAGES[category]


class OperationState(BaseModel):
    loading: bool = False
    error: Optional[str] = None


class SurveyClient:
    """Async client for submitting surveys and reading analytics.

    Call `init()` before use and `teardown()` when done, or use the client
    as an async context manager.
    """

    def __init__(
        self,
        base_url: str,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        validator: Optional[SurveyValidator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        """Initialize the client.

        Args:
            base_url: Root URL of the survey API
            retry_policy: Attempt limit and backoff settings
            sleep: Awaitable used to wait between attempts
            validator: Validator used for the pre-submission check
            transport: Optional httpx transport, mainly for tests
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.retry_policy = retry_policy or RetryPolicy()
        self.validator = validator or SurveyValidator()
        self._sleep = sleep
        self._transport = transport
        self._timeout = timeout
        self._http: Optional[httpx.AsyncClient] = None

        self.nps: float = 0.0
        self.average: float = 0.0
        self.distribution: Dict[int, int] = {}
        self.field_errors: Dict[str, List[str]] = {}
        self.last_submission_id: Optional[str] = None
        self.states: Dict[str, OperationState] = {
            name: OperationState() for name in (SUBMIT, NPS, AVERAGE, DISTRIBUTION)
        }
        self.last_runs: Dict[str, RetryRun] = {}

    async def init(self) -> None:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
                timeout=self._timeout,
            )

    async def teardown(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "SurveyClient":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.teardown()

    async def submit_survey(self, request: SurveyRequest) -> SurveyCreated:
        """Submit a survey response and refresh analytics on success.

        The submission is validated locally first; invalid input raises
        SurveyValidationError without a network call.
        """
        state = self.states[SUBMIT]
        result = self.validator.validate(request)
        if not result.valid:
            self.field_errors = result.field_errors
            state.error = friendly_message(SurveyValidationError(result.field_errors))
            raise SurveyValidationError(result.field_errors)

        payload = SurveyRequest(
            likelihood_to_recommend=request.likelihood_to_recommend,
            comments=sanitize_text(request.comments) or None,
            email=sanitize_email(request.email),
        )

        async def call() -> SurveyCreated:
            data = await self._request("POST", "/api/survey", json=payload.to_wire())
            return SurveyCreated.model_validate(data)

        try:
            created = await self._run(SUBMIT, call)
        except ApiError as e:
            errors = e.body.get("errors")
            if isinstance(errors, dict):
                self.field_errors = errors
            raise

        self.field_errors = {}
        self.last_submission_id = created.id
        await self.refresh_analytics()
        return created

    async def fetch_nps(self) -> float:
        async def call() -> float:
            data = await self._request("GET", "/api/survey/nps")
            return float(data["nps"])

        self.nps = await self._run(NPS, call)
        return self.nps

    async def fetch_average(self) -> float:
        async def call() -> float:
            data = await self._request("GET", "/api/survey/average")
            return float(data["average"])

        self.average = await self._run(AVERAGE, call)
        return self.average

    async def fetch_distribution(self) -> Dict[int, int]:
        async def call() -> Dict[int, int]:
            data = await self._request("GET", "/api/survey/distribution")
            return {int(rating): int(count) for rating, count in data.items()}

        self.distribution = await self._run(DISTRIBUTION, call)
        return self.distribution

    async def refresh_analytics(self) -> None:
        """Reload NPS, average and distribution in parallel.

        Failures are recorded in each operation's state and logged, never
        raised.
        """
        results = await asyncio.gather(
            self.fetch_nps(),
            self.fetch_average(),
            self.fetch_distribution(),
            return_exceptions=True,
        )
        for name, result in zip((NPS, AVERAGE, DISTRIBUTION), results):
            if isinstance(result, BaseException):
                logger.warning(f"Analytics refresh of {name} failed: {result}")

    async def _run(self, operation: str, call: Callable[[], Awaitable[Any]]) -> Any:
        state = self.states[operation]
        state.loading = True
        state.error = None
        run = RetryRun(self.retry_policy, self._sleep, name=operation)
        self.last_runs[operation] = run

        async def attempt() -> Any:
            try:
                return await call()
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise UnexpectedError(f"Unexpected response for {operation}") from e

        try:
            return await run.run(attempt)
        except SurveyError as e:
            state.error = friendly_message(e)
            logger.warning(
                f"{operation} failed after {run.attempt} attempt(s): {e}"
            )
            raise
        finally:
            state.loading = False

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        if self._http is None:
            raise RuntimeError("SurveyClient.init() must be awaited before use")

        try:
            response = await self._http.request(method, path, json=json)
        except httpx.TransportError as e:
            raise NetworkError(str(e)) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # Decoding, redirect and other request failures after transport
            raise UnexpectedError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            raise ApiError(response.status_code, body.get("title", ""), body)

        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedError(f"Malformed response from {path}") from e
