# Infrastructure Adapters Package
from .json_store import JsonStudyRepository

__all__ = ["JsonStudyRepository"]
