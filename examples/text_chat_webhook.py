"""turnkit: Typed chat against a workflow webhook, with optional spoken replies.

Requirements:
    pip install turnkit                 # text only
    pip install turnkit[local-tts,local-audio]   # with SPEAK=1

Run with:
    TURNKIT_WEBHOOK_URL=http://localhost:5678/webhook/chat \\
        uv run python examples/text_chat_webhook.py

Environment variables:
    TURNKIT_WEBHOOK_URL   (required) Webhook URL
    SPEAK                 Speak replies with the on-device voice: 1 | 0 (default: 0)

Type an empty line or Ctrl+D to quit.
"""

from __future__ import annotations

import asyncio
import logging
import os

from turnkit import (
    MockRecognitionBackend,
    TurnController,
    TurnErrorEvent,
    TurnKitConfig,
    WebhookReplyConfig,
    WebhookReplyProvider,
)

logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger("text_chat_webhook")


async def main() -> None:
    webhook_url = os.environ.get("TURNKIT_WEBHOOK_URL")
    if not webhook_url:
        print("Set TURNKIT_WEBHOOK_URL to run this example.")
        return

    speak = os.environ.get("SPEAK", "0") == "1"
    tts_providers = []
    output = None
    if speak:
        from turnkit.voice.output.sounddevice import SoundDeviceOutput
        from turnkit.voice.tts.pyttsx3 import Pyttsx3TTSProvider

        tts_providers = [Pyttsx3TTSProvider()]
        output = SoundDeviceOutput()

    controller = TurnController.create(
        TurnKitConfig(tts_enabled=speak),
        # No microphone: typed input only.
        recognition_backend=MockRecognitionBackend(supported=False),
        reply_provider=WebhookReplyProvider(WebhookReplyConfig(webhook_url=webhook_url)),
        tts_providers=tts_providers,
        output=output,
    )

    def on_error(event: TurnErrorEvent) -> None:
        print(f"! {event.message}: please try again")

    controller.on_error(on_error)

    while True:
        try:
            text = await asyncio.to_thread(input, "você> ")
        except EOFError:
            break
        if not text.strip():
            break
        reply = await controller.submit_text(text)
        if reply is not None:
            print(f"assistente> {reply}")
        await controller.drain()

    await controller.close()


if __name__ == "__main__":
    asyncio.run(main())
