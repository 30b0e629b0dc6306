"""
Ports (interfaces) for card, review and settings persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Card, Review, Settings


class CardRepository(ABC):
    """
    Port for reading and writing cards.

    Implementations:
        - JsonStudyRepository: A single JSON document on disk.
    """

    @abstractmethod
    async def list_cards(self) -> list[Card]:
        """
        Return every card in store order.
        """
        pass

    @abstractmethod
    async def get_card(self, card_id: str) -> Card | None:
        pass

    @abstractmethod
    async def find_by_characters(self, characters: str) -> Card | None:
        """
        Return the first card whose characters match exactly, if any.
        """
        pass

    @abstractmethod
    async def save_card(self, card: Card) -> None:
        """
        Insert the card, or replace the stored card with the same id.
        """
        pass


class ReviewLog(ABC):
    """Port for the append-only review history."""

    @abstractmethod
    async def append_review(self, review: Review) -> None:
        pass

    @abstractmethod
    async def list_reviews(self) -> list[Review]:
        """
        Return all reviews, oldest first.
        """
        pass


class SettingsStore(ABC):
    """Port for the persisted study settings."""

    @abstractmethod
    async def load_settings(self) -> Settings:
        """
        Load settings, merging defaults in for any missing fields.

        Returns:
            The stored settings, or the defaults if none were saved yet.
        """
        pass

    @abstractmethod
    async def save_settings(self, settings: Settings) -> None:
        pass
