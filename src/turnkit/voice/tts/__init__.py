"""Text-to-speech providers."""

from turnkit.voice.tts.base import TTSProvider
from turnkit.voice.tts.mock import MockTTSProvider

__all__ = ["MockTTSProvider", "TTSProvider"]
