"""Calendar Assistant - chat-driven Google Calendar automation.

This package turns free-text messages into Google Calendar events and
answers free-text schedule questions, using a local Ollama model to parse
the text and an explicit confirmation step before anything is written.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from calendar_assistant.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__", "__author__"]
