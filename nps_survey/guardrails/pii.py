import logging
from typing import Dict, Any, List

import scrubadub

from nps_survey.interfaces.guardrails.guardrails import InputGuardrail

logger = logging.getLogger(__name__)


class PII(InputGuardrail):
    """
    A guardrail using Scrubadub to redact personal data from survey comments.

    Requires 'scrubadub'. Install with: pip install nps-survey[guardrails]
    """

    DEFAULT_REPLACEMENT = "[REDACTED_{detector_name}]"
    DEFAULT_LANG = "en_US"  # Scrubadub uses locale format

    def __init__(self, config: Dict[str, Any] = None):
        super().__init__(config)
        self.replacement_format = self.config.get(
            "replacement", self.DEFAULT_REPLACEMENT
        )
        self.locale = self.config.get("locale", self.DEFAULT_LANG)
        # Detector instances to add on top of the defaults
        self.extra_detector_list: List[Any] = self.config.get("extra_detectors", [])

        try:
            self.scrubber = scrubadub.Scrubber(locale=self.locale)

            for detector in self.extra_detector_list:
                if isinstance(detector, scrubadub.detectors.Detector):
                    self.scrubber.add_detector(detector)
                else:
                    logger.warning(f"Invalid item in extra_detectors: {detector}")

            logger.info(f"PII guardrail initialized for locale '{self.locale}'")

        except Exception as e:
            logger.error(f"Failed to initialize Scrubadub: {e}", exc_info=True)
            raise

    async def process(self, text: str) -> str:
        """Replace every detected piece of personal data in the comment."""
        if not text:
            return text

        try:
            filth_list = list(self.scrubber.iter_filth(text))
            if not filth_list:
                return text

            # Sort by start index to handle replacements correctly
            filth_list.sort(key=lambda f: f.beg)

            clean_text = text
            offset = 0
            for filth in filth_list:
                start = filth.beg + offset
                end = filth.end + offset
                replacement_text = self.replacement_format.format(
                    detector_name=filth.detector_name,
                    text=filth.text,
                    locale=filth.locale,
                )

                clean_text = clean_text[:start] + replacement_text + clean_text[end:]
                offset += len(replacement_text) - (filth.end - filth.beg)

            logger.debug(f"PII guardrail redacted {len(filth_list)} pieces of filth.")
            return clean_text

        except Exception as e:
            logger.error(f"Error during Scrubadub cleaning: {e}", exc_info=True)
            return text  # Return original text on error
