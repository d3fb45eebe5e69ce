"""
Domain models for the NPS survey system.

This package contains the survey records, wire schemas shared by the
server and the client, and the error taxonomy.
"""

from nps_survey.domains.survey import *
from nps_survey.domains.errors import *
