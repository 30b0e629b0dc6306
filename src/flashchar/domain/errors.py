"""Exception hierarchy for flashchar.

Scheduler functions never raise; these cover caller contract violations
and rejected input at the application boundary.
"""

from pathlib import Path


class FlashcharError(Exception):
    """Base class for all flashchar errors."""


class SessionError(FlashcharError):
    """A session queue operation was called in violation of its contract."""


class NotQueueHeadError(SessionError):
    def __init__(self, card_id: str, head: str):
        super().__init__(f"Card {card_id!r} is not at the head of the queue (head is {head!r})")
        self.card_id = card_id
        self.head = head


class SessionFinishedError(SessionError):
    def __init__(self, card_id: str | None = None):
        target = repr(card_id) if card_id else "a card"
        super().__init__(f"Cannot grade {target}: the session queue is empty")
        self.card_id = card_id


class SettingsValidationError(FlashcharError):
    def __init__(self, problems: list[str]):
        super().__init__("Invalid settings: " + "; ".join(problems))
        self.problems = problems


class CardNotFoundError(FlashcharError):
    def __init__(self, card_id: str):
        super().__init__(f"Card {card_id!r} not found")
        self.card_id = card_id


class ImportFormatError(FlashcharError):
    """Import payload could not be parsed."""


class StoreCorruptError(FlashcharError):
    """The persisted store holds data that cannot be decoded."""

    def __init__(self, path: Path, detail: str):
        super().__init__(f"Cannot read {path}: {detail}")
        self.path = path
