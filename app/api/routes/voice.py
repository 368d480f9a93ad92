"""
Voice Routes
Speech-to-text and streaming text-to-speech through Deepgram
"""
import logging
import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from app.api.forms import read_json
from app.core.config import settings
from app.core.dependencies import get_http_client
from app.middleware.rate_limit import RateLimit
from app.services.voice import SpeechProviderError, iter_speech, open_speech_stream, transcribe

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["voice"])


@router.post("/speech")
async def speech_to_text(
    request: Request,
    identifier: str = Depends(RateLimit(20, 60 * 1000)),
    http_client: httpx.AsyncClient = Depends(get_http_client)
):
    """Transcribe a raw audio body. Returns {"transcript": "..."}."""
    audio = await request.body()
    if not audio:
        raise HTTPException(status_code=400, detail="No audio data provided")

    try:
        transcript = await transcribe(http_client, audio, request.headers.get("content-type"))
    except SpeechProviderError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"transcript": transcript}


@router.post("/tts")
async def text_to_speech(
    request: Request,
    identifier: str = Depends(RateLimit(20, 60 * 1000)),
    http_client: httpx.AsyncClient = Depends(get_http_client)
):
    """
    Synthesize speech and stream raw PCM back as it arrives.

    Response headers describe the format so the browser can play chunks
    without a container: 16-bit, mono, X-Sample-Rate Hz.
    """
    payload = await read_json(request)
    text = payload.get("text") if isinstance(payload, dict) else None
    if not text or not isinstance(text, str):
        raise HTTPException(status_code=400, detail="Text is required")

    try:
        upstream = await open_speech_stream(http_client, text)
    except SpeechProviderError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return StreamingResponse(
        iter_speech(upstream),
        media_type="audio/pcm",
        headers={
            "X-Sample-Rate": str(settings.tts_sample_rate),
            "X-Channels": "1",
            "X-Bit-Depth": "16",
            "Cache-Control": "no-cache",
        },
    )
