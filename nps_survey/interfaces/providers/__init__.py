from nps_survey.interfaces.providers.data_storage import DataStorageProvider

__all__ = ["DataStorageProvider"]
