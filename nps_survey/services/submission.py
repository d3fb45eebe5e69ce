"""
Survey submission service implementation.

This service validates incoming submissions, runs the comment guardrails,
normalizes the email and appends the resulting record to the store.
"""
import asyncio
import logging
from typing import Dict, List, Optional

from nps_survey.domains import (
    MAX_COMMENT_LENGTH,
    SurveyCreated,
    SurveyRecord,
    SurveyRequest,
    SurveyValidationError,
)
from nps_survey.guardrails.sanitizer import MarkupSanitizer, sanitize_email
from nps_survey.guardrails.validation import SurveyValidator
from nps_survey.interfaces.guardrails.guardrails import InputGuardrail
from nps_survey.interfaces.repositories import SurveyRepository
from nps_survey.interfaces.services import SubmissionService as SubmissionServiceInterface

__all__ = ["SubmissionService"]

logger = logging.getLogger(__name__)


class SubmissionService(SubmissionServiceInterface):
    """Service for accepting survey submissions."""

    def __init__(
        self,
        survey_repository: SurveyRepository,
        validator: Optional[SurveyValidator] = None,
        input_guardrails: Optional[List[InputGuardrail]] = None,
    ):
        """Initialize the submission service.

        Args:
            survey_repository: Repository for storing survey records
            validator: Validator applied to raw submissions
            input_guardrails: Extra guardrails run on comments after markup removal
        """
        self.survey_repository = survey_repository
        self.validator = validator or SurveyValidator()
        self.input_guardrails: List[InputGuardrail] = [MarkupSanitizer()]
        self.input_guardrails.extend(input_guardrails or [])

    async def submit(self, request: SurveyRequest) -> SurveyCreated:
        result = self.validator.validate(request)
        if not result.valid:
            logger.info(
                f"Rejected survey submission: {sorted(result.field_errors)}"
            )
            raise SurveyValidationError(result.field_errors)

        record = await self._build_record(request)
        # Run the blocking store write in the thread pool
        stored = await asyncio.to_thread(self.survey_repository.append, record)

        # Analytics are recomputed from the store on every read, so there is
        # no cached aggregate to refresh here.
        return SurveyCreated(id=stored.id)

    async def seed(self, requests: List[SurveyRequest]) -> int:
        """Store a batch of submissions.

        Every submission is validated before anything is written and the
        batch is stored in a single write. Errors are keyed as
        "<index>.<field>".

        Args:
            requests: Submissions to store

        Returns:
            Number of records stored
        """
        errors: Dict[str, List[str]] = {}
        for index, request in enumerate(requests):
            result = self.validator.validate(request)
            for field, messages in result.field_errors.items():
                errors[f"{index}.{field}"] = messages

        if errors:
            logger.info(f"Rejected seed batch with {len(errors)} invalid fields")
            raise SurveyValidationError(errors)

        records = [await self._build_record(request) for request in requests]
        if records:
            await asyncio.to_thread(self.survey_repository.append_many, records)

        logger.info(f"Seeded {len(records)} survey records")
        return len(records)

    def reset(self) -> int:
        return self.survey_repository.reset_all()

    async def _build_record(self, request: SurveyRequest) -> SurveyRecord:
        comment = request.comments
        if comment:
            for guardrail in self.input_guardrails:
                comment = await guardrail.process(comment)

        return SurveyRecord(
            rating=request.likelihood_to_recommend,
            comment=comment[:MAX_COMMENT_LENGTH] if comment else None,
            email=sanitize_email(request.email) or None,
        )
