"""turnkit: Hands-free voice assistant with local mic/speakers.

Speak into the microphone; utterances are sent to a workflow webhook and the
reply is spoken back. The microphone is muted while the assistant speaks and
for a short cooldown afterwards, and anything that still sounds like the last
reply is discarded.

Requirements:
    pip install turnkit[speech,local-tts,local-audio]

Run with:
    TURNKIT_WEBHOOK_URL=http://localhost:5678/webhook/chat \\
        uv run python examples/voice_assistant_local.py

Environment variables:
    TURNKIT_WEBHOOK_URL   (required) Webhook that answers {"message", "inputType"}
    ELEVENLABS_API_KEY    ElevenLabs key (ELEVEN_LABS_API_KEY also accepted);
                          without it the on-device voice is used
    TURNKIT_LANGUAGE      Recognition and voice language (default: pt-BR)

Press Ctrl+C to stop.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal

from turnkit import (
    EchoDiscardedEvent,
    TurnController,
    TurnErrorEvent,
    TurnKitConfig,
    WebhookReplyConfig,
    WebhookReplyProvider,
)
from turnkit.voice.output.sounddevice import SoundDeviceOutput
from turnkit.voice.recognition.speech_recognition import SpeechRecognitionBackend
from turnkit.voice.tts.elevenlabs import ElevenLabsConfig, ElevenLabsTTSProvider
from turnkit.voice.tts.pyttsx3 import Pyttsx3TTSConfig, Pyttsx3TTSProvider

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger("voice_assistant_local")


async def main() -> None:
    webhook_url = os.environ.get("TURNKIT_WEBHOOK_URL")
    if not webhook_url:
        print("Set TURNKIT_WEBHOOK_URL to run this example.")
        print("  TURNKIT_WEBHOOK_URL=... uv run python examples/voice_assistant_local.py")
        return

    language = os.environ.get("TURNKIT_LANGUAGE", "pt-BR")
    api_key = os.environ.get("ELEVENLABS_API_KEY") or os.environ.get("ELEVEN_LABS_API_KEY")

    config = TurnKitConfig(continuous_listening=True, tts_enabled=True, language=language)

    # --- Synthesis: ElevenLabs first, on-device voice as fallback ---
    tts_providers = [
        ElevenLabsTTSProvider(ElevenLabsConfig(api_key=api_key)),
        Pyttsx3TTSProvider(Pyttsx3TTSConfig(language=language)),
    ]

    controller = TurnController.create(
        config,
        recognition_backend=SpeechRecognitionBackend(),
        reply_provider=WebhookReplyProvider(WebhookReplyConfig(webhook_url=webhook_url)),
        tts_providers=tts_providers,
        output=SoundDeviceOutput(),
    )

    controller.on_transcript(lambda text: print(f"\r… {text}", end="", flush=True))
    controller.on_reply(lambda event: print(f"\n🤖 {event.text}"))

    def on_event(event: object) -> None:
        if isinstance(event, EchoDiscardedEvent):
            logger.info("Ignored echo: %r", event.text)

    def on_error(event: TurnErrorEvent) -> None:
        retry = " (try again)" if event.retryable else ""
        logger.warning("%s error: %s%s", event.source, event.message, retry)

    controller.on_event(on_event)
    controller.on_error(on_error)

    if not controller.recognition.is_supported:
        logger.warning("No microphone available; nothing to listen to.")
        await controller.close()
        return

    await controller.start()
    logger.info("Listening: speak into your microphone!")
    logger.info("Press Ctrl+C to stop.\n")

    # --- Keep running until Ctrl+C ---
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await stop.wait()

    logger.info("\nStopping...")
    await controller.close()
    logger.info("Done.")


if __name__ == "__main__":
    asyncio.run(main())
