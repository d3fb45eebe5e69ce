from nps_survey.client.retry import RetryPolicy, RetryRun, RetryState, backoff_delay, should_retry
from nps_survey.client.survey_client import FRIENDLY_MESSAGES, OperationState, SurveyClient, friendly_message

__all__ = [
    "FRIENDLY_MESSAGES",
    "OperationState",
    "RetryPolicy",
    "RetryRun",
    "RetryState",
    "SurveyClient",
    "backoff_delay",
    "friendly_message",
    "should_retry",
]
