"""Runtime configuration consumed by the turn controller."""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_LANGUAGE = "pt-BR"
DEFAULT_MIN_CONFIDENCE = 0.6
RESTART_DELAY_SECONDS = 1.0
COOLDOWN_SECONDS = 1.2


class TurnKitConfig(BaseModel):
    """Settings for a voice dialogue session.

    Attributes:
        continuous_listening: Keep the microphone open between turns and
            restart recognition whenever the platform ends a session.
        tts_enabled: Speak assistant replies aloud.
        min_confidence: Minimum recognizer confidence for a final
            transcript to be forwarded.
        language: BCP-47 tag used for recognition and the on-device voice.
        restart_delay_seconds: Delay before recognition restarts after the
            platform ends a session.
        cooldown_seconds: Time after synthesis ends before the microphone
            may reopen.
    """

    continuous_listening: bool = False
    tts_enabled: bool = False
    min_confidence: float = Field(default=DEFAULT_MIN_CONFIDENCE, ge=0.0, le=1.0)
    language: str = DEFAULT_LANGUAGE
    restart_delay_seconds: float = Field(default=RESTART_DELAY_SECONDS, ge=0.0)
    cooldown_seconds: float = Field(default=COOLDOWN_SECONDS, ge=0.0)
