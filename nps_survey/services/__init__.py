"""
Service implementations for the NPS survey system.

These services implement the business logic interfaces defined in
nps_survey.interfaces.services.
"""

from nps_survey.services.nps import *
from nps_survey.services.submission import *
from nps_survey.services.analytics import *
