# Domain Package
from .errors import (
    CardNotFoundError,
    FlashcharError,
    ImportFormatError,
    NotQueueHeadError,
    SessionError,
    SessionFinishedError,
    SettingsValidationError,
    StoreCorruptError,
)
from .models import (
    Card,
    CardField,
    DedupeImportMode,
    InfiniteRuleConfig,
    ResultType,
    Review,
    SessionCardState,
    SessionState,
    Settings,
    SlowCorrectCapMode,
    StepConfig,
    WrongBehavior,
)

__all__ = [
    "Card",
    "CardField",
    "CardNotFoundError",
    "DedupeImportMode",
    "FlashcharError",
    "ImportFormatError",
    "InfiniteRuleConfig",
    "NotQueueHeadError",
    "ResultType",
    "Review",
    "SessionCardState",
    "SessionError",
    "SessionFinishedError",
    "SessionState",
    "Settings",
    "SettingsValidationError",
    "SlowCorrectCapMode",
    "StepConfig",
    "StoreCorruptError",
    "WrongBehavior",
]
