"""
Adapters for external systems.

These adapters implement the provider interfaces defined in
nps_survey.interfaces and talk to concrete storage backends.
"""
