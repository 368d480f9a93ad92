"""
Voice Services
Deepgram speech-to-text and streaming text-to-speech
"""
from app.services.voice.deepgram_client import (
    SpeechProviderError,
    iter_speech,
    open_speech_stream,
    transcribe,
)

__all__ = [
    "SpeechProviderError",
    "iter_speech",
    "open_speech_stream",
    "transcribe",
]
