"""
Factory for creating and wiring components of the NPS survey system.

This module handles configuration loading and the dependency injection
for the storage adapter, the repository and the services.
"""

import importlib
import importlib.util
import json
import logging
from typing import Any, Dict, List, Optional

from nps_survey.adapters.mongodb_adapter import MongoDBAdapter
from nps_survey.guardrails.validation import SurveyValidator
from nps_survey.interfaces.guardrails.guardrails import InputGuardrail
from nps_survey.interfaces.providers import DataStorageProvider
from nps_survey.repositories.mongo_survey import MongoSurveyRepository
from nps_survey.services.analytics import AnalyticsService
from nps_survey.services.submission import SubmissionService

# Setup logger for this module
logger = logging.getLogger(__name__)


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from a JSON file or a Python file exporting `config`."""
    if config_path.endswith(".json"):
        with open(config_path, "r") as f:
            return json.load(f)

    spec = importlib.util.spec_from_file_location("config", config_path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot load configuration from {config_path}")
    config_module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(config_module)
    return config_module.config


class SurveyServices:
    """The wired components of a running survey system."""

    def __init__(
        self,
        config: Dict[str, Any],
        db_adapter: Optional[DataStorageProvider],
        repository: MongoSurveyRepository,
        submission_service: SubmissionService,
        analytics_service: AnalyticsService,
    ):
        self.config = config
        self.db_adapter = db_adapter
        self.repository = repository
        self.submission_service = submission_service
        self.analytics_service = analytics_service

    @property
    def testing_enabled(self) -> bool:
        return bool(self.config.get("testing", {}).get("enabled", False))

    @property
    def testing_api_key(self) -> Optional[str]:
        return self.config.get("testing", {}).get("api_key")

    def close(self) -> None:
        close = getattr(self.db_adapter, "close", None)
        if callable(close):
            close()


class SurveyFactory:
    """Factory for creating and wiring components of the NPS survey system."""

    @staticmethod
    def _create_guardrails(guardrail_configs: List[Dict[str, Any]]) -> List[InputGuardrail]:
        """Instantiates guardrails from configuration."""
        guardrails = []
        if not guardrail_configs:
            return guardrails

        for config in guardrail_configs:
            class_path = config.get("class")
            guardrail_config = config.get("config", {})
            if not class_path:
                logger.warning(f"Guardrail config missing 'class': {config}")
                continue
            try:
                module_path, class_name = class_path.rsplit(".", 1)
                module = importlib.import_module(module_path)
                guardrail_class = getattr(module, class_name)
            except (ImportError, AttributeError, ValueError) as e:
                logger.error(f"Error loading guardrail class '{class_path}': {e}")
                continue

            try:
                guardrails.append(guardrail_class(config=guardrail_config))
                logger.info(f"Successfully loaded guardrail: {class_path}")
            except Exception as init_e:
                logger.error(f"Error initializing guardrail '{class_path}': {init_e}")
        return guardrails

    @staticmethod
    def create_validator(config: Dict[str, Any]) -> SurveyValidator:
        validation_config = config.get("validation", {})
        return SurveyValidator(
            strict_comment_characters=validation_config.get(
                "strict_comment_characters", True
            )
        )

    @staticmethod
    def create_from_config(
        config: Dict[str, Any],
        db_adapter: Optional[DataStorageProvider] = None,
    ) -> SurveyServices:
        """Create the survey system from configuration.

        Args:
            config: Configuration dictionary
            db_adapter: Storage adapter to use instead of one built from
                the "mongo" section

        Returns:
            Wired services
        """
        if db_adapter is None:
            if "mongo" not in config:
                raise ValueError("MongoDB configuration is required.")
            if "connection_string" not in config["mongo"]:
                raise ValueError("MongoDB connection string is required.")
            if "database" not in config["mongo"]:
                raise ValueError("MongoDB database name is required.")
            db_adapter = MongoDBAdapter(
                connection_string=config["mongo"]["connection_string"],
                database_name=config["mongo"]["database"],
            )

        repository = MongoSurveyRepository(
            db_adapter, collection=config.get("mongo", {}).get("collection", "surveys")
        )

        guardrail_config = config.get("guardrails", {})
        input_guardrails = SurveyFactory._create_guardrails(
            guardrail_config.get("input", [])
        )
        logger.info(f"Loaded {len(input_guardrails)} input guardrails.")

        submission_service = SubmissionService(
            survey_repository=repository,
            validator=SurveyFactory.create_validator(config),
            input_guardrails=input_guardrails,
        )
        analytics_service = AnalyticsService(survey_repository=repository)

        testing = config.get("testing", {})
        if testing.get("enabled") and not testing.get("api_key"):
            logger.warning("Testing endpoints enabled without an api_key; they will reject every call.")

        return SurveyServices(
            config=config,
            db_adapter=db_adapter,
            repository=repository,
            submission_service=submission_service,
            analytics_service=analytics_service,
        )
