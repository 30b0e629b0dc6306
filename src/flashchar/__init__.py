"""flashchar: spaced-repetition flashcards for Chinese characters."""

from flashchar.consts import VERSION

__version__ = VERSION
