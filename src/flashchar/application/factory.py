"""
Service Factory
Centralizes wiring of the storage adapter into application services.
"""

from flashchar.application.config import AppConfig
from flashchar.application.review_service import ReviewService
from flashchar.application.settings_service import SettingsService
from flashchar.infrastructure.adapters.json_store import JsonStudyRepository


def get_repository(config: AppConfig) -> JsonStudyRepository:
    """
    Returns the study repository for the configured data file.
    """
    return JsonStudyRepository(config.data_file)


def get_review_service(repo: JsonStudyRepository) -> ReviewService:
    return ReviewService(cards=repo, reviews=repo, settings_store=repo)


def get_settings_service(repo: JsonStudyRepository) -> SettingsService:
    return SettingsService(repo)
