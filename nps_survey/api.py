"""
HTTP API for survey submission and analytics.

Validation failures answer 400 with a problem body listing every field
error; storage failures answer 500 with a generic message.
"""
import logging
import secrets
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nps_survey.domains import (
    AverageResponse,
    NpsBreakdown,
    NpsResponse,
    PersistenceError,
    SurveyCreated,
    SurveyRequest,
    SurveyValidationError,
)
from nps_survey.factories.survey_factory import SurveyServices

logger = logging.getLogger(__name__)

VALIDATION_TITLE = "One or more validation errors occurred."
SUBMISSION_FAILED_TITLE = "Submission failed. Please try again."
ANALYTICS_FAILED_TITLE = "Unable to load analytics."
TESTING_FAILED_TITLE = "Test data operation failed."
TEST_AUTH_HEADER = "X-Test-Auth"


def problem(status_code: int, title: str, errors: Optional[Dict[str, List[str]]] = None) -> JSONResponse:
    body = {"title": title, "status": status_code}
    if errors is not None:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body)


class _Unauthorized(Exception):
    pass


def get_services(request: Request) -> SurveyServices:
    return request.app.state.services


def require_test_auth(
    request: Request,
    x_test_auth: Optional[str] = Header(None, alias=TEST_AUTH_HEADER),
) -> None:
    expected = get_services(request).testing_api_key
    if not expected or x_test_auth is None or not secrets.compare_digest(
        x_test_auth.encode(), expected.encode()
    ):
        logger.warning(f"Rejected unauthorized call to {request.url.path}")
        raise _Unauthorized()


survey_router = APIRouter(prefix="/api/survey", tags=["survey"])
testing_router = APIRouter(
    prefix="/testing", tags=["testing"], dependencies=[Depends(require_test_auth)]
)


@survey_router.post("", status_code=status.HTTP_201_CREATED, response_model=SurveyCreated)
async def submit_survey(payload: SurveyRequest, response: Response, request: Request):
    created = await get_services(request).submission_service.submit(payload)
    response.headers["Location"] = f"/api/survey/{created.id}"
    return created


@survey_router.get("/nps", response_model=NpsResponse)
def get_nps(request: Request):
    return NpsResponse(nps=get_services(request).analytics_service.get_nps())


@survey_router.get("/nps/breakdown", response_model=NpsBreakdown)
def get_nps_breakdown(request: Request):
    return get_services(request).analytics_service.get_nps_breakdown()


@survey_router.get("/average", response_model=AverageResponse)
def get_average(request: Request):
    return AverageResponse(average=get_services(request).analytics_service.get_average())


@survey_router.get("/distribution", response_model=Dict[int, int])
def get_distribution(request: Request):
    return get_services(request).analytics_service.get_distribution()


@testing_router.post("/reset")
def reset(request: Request):
    deleted = get_services(request).submission_service.reset()
    return {"deleted": deleted}


@testing_router.post("/seed")
async def seed(payload: List[SurveyRequest], request: Request):
    count = await get_services(request).submission_service.seed(payload)
    return {"count": count}


def failure_title(request: Request) -> str:
    """Pick the storage failure title for the route that failed."""
    path = request.url.path.rstrip("/")
    if path.startswith(testing_router.prefix):
        return TESTING_FAILED_TITLE
    if path == survey_router.prefix and request.method == "POST":
        return SUBMISSION_FAILED_TITLE
    return ANALYTICS_FAILED_TITLE


def create_app(services: SurveyServices) -> FastAPI:
    """Build the FastAPI application around wired services.

    Args:
        services: Services created by SurveyFactory

    Returns:
        The application; testing routes are mounted only when enabled
    """
    app = FastAPI(title="NPS Survey")
    app.state.services = services

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors: Dict[str, List[str]] = {}
        for error in exc.errors():
            location = [str(part) for part in error.get("loc", ()) if part != "body"]
            field = ".".join(location) or "body"
            errors.setdefault(field, []).append(error.get("msg", "Invalid value."))
        return problem(status.HTTP_400_BAD_REQUEST, VALIDATION_TITLE, errors)

    @app.exception_handler(SurveyValidationError)
    async def survey_validation_handler(request: Request, exc: SurveyValidationError):
        return problem(status.HTTP_400_BAD_REQUEST, VALIDATION_TITLE, exc.field_errors)

    @app.exception_handler(PersistenceError)
    async def persistence_handler(request: Request, exc: PersistenceError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return problem(status.HTTP_500_INTERNAL_SERVER_ERROR, failure_title(request))

    @app.exception_handler(_Unauthorized)
    async def unauthorized_handler(request: Request, exc: _Unauthorized):
        return problem(status.HTTP_401_UNAUTHORIZED, "Unauthorized")

    app.include_router(survey_router)
    if services.testing_enabled:
        app.include_router(testing_router)
        logger.warning("Testing endpoints are enabled")

    return app
