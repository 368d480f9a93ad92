"""
Deepgram Client
Speech-to-text (listen) and text-to-speech (speak) over the shared HTTP client
"""
import logging
import httpx
from typing import AsyncIterator, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_CONTENT_TYPE = "audio/webm"


class SpeechProviderError(Exception):
    """Deepgram is not configured or rejected the request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _auth_headers() -> dict:
    if not settings.deepgram_api_key:
        raise SpeechProviderError("Deepgram API key not configured")
    return {"Authorization": f"Token {settings.deepgram_api_key}"}


async def transcribe(
    http_client: httpx.AsyncClient,
    audio: bytes,
    content_type: Optional[str] = None
) -> str:
    """
    Transcribe recorded audio with Deepgram.

    Args:
        http_client: HTTP client
        audio: Raw audio bytes as recorded by the browser
        content_type: Audio MIME type (defaults to audio/webm)

    Returns:
        Transcript text ("" when Deepgram heard nothing)

    Raises:
        SpeechProviderError: missing key or non-2xx response
    """
    headers = _auth_headers()
    headers["Content-Type"] = content_type or DEFAULT_AUDIO_CONTENT_TYPE

    response = await http_client.post(
        f"{settings.deepgram_base_url}/listen",
        params={
            "model": settings.deepgram_stt_model,
            "smart_format": "true",
            "language": "en",
        },
        headers=headers,
        content=audio
    )

    if response.status_code >= 400:
        logger.error(f"Deepgram STT error {response.status_code}: {response.text}")
        raise SpeechProviderError("Speech-to-text failed", response.status_code)

    payload = response.json()
    try:
        return payload["results"]["channels"][0]["alternatives"][0]["transcript"] or ""
    except (KeyError, IndexError, TypeError):
        return ""


async def open_speech_stream(http_client: httpx.AsyncClient, text: str) -> httpx.Response:
    """
    Start a Deepgram synthesis and return the open streaming response.

    Audio is raw 16-bit mono PCM (linear16) at settings.tts_sample_rate.
    The caller owns the response: pass it to iter_speech, which closes it.

    Raises:
        SpeechProviderError: missing key or non-2xx response
    """
    headers = _auth_headers()
    headers["Content-Type"] = "application/json"

    request = http_client.build_request(
        "POST",
        f"{settings.deepgram_base_url}/speak",
        params={
            "model": settings.deepgram_tts_model,
            "encoding": "linear16",
            "sample_rate": str(settings.tts_sample_rate),
        },
        headers=headers,
        json={"text": text}
    )
    response = await http_client.send(request, stream=True)

    if response.status_code >= 400:
        body = await response.aread()
        await response.aclose()
        logger.error(f"Deepgram TTS error {response.status_code}: {body[:500]!r}")
        raise SpeechProviderError("Text-to-speech failed", response.status_code)

    return response


async def iter_speech(response: httpx.Response) -> AsyncIterator[bytes]:
    """
    Yield synthesized audio as it arrives from Deepgram.

    The upstream response is closed when the stream ends, fails or the
    client disconnects mid-stream.
    """
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    finally:
        await response.aclose()
