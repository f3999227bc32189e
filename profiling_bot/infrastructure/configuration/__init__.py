"""Infrastructure configuration module."""

from .json_quiz_provider import JsonQuizConfigurationProvider, DEFAULT_SETTINGS

__all__ = [
    "JsonQuizConfigurationProvider",
    "DEFAULT_SETTINGS",
]
