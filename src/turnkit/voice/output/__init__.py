"""Audio output sinks for synthesized speech."""

from turnkit.voice.output.base import AudioOutput, PlaybackHandle
from turnkit.voice.output.mock import MockAudioOutput, MockPlayback

__all__ = ["AudioOutput", "MockAudioOutput", "MockPlayback", "PlaybackHandle"]
