"""
Text-to-speech narration using Google Cloud Text-to-Speech.

Used by the companion's "read aloud" button and by the hero narration.
"""

import asyncio
import json
import os
import re
import tempfile
from typing import List, Optional

from google.cloud import texttospeech

from app.core.concurrency import (
    SPEECH_SEMAPHORE,
    SPEECH_WIDGET,
    widget_guard,
    with_concurrency_limit,
)
from app.core.config import settings
from app.core.logger_config import setup_logger
from app.exceptions import ChatbotError, ConfigurationError, SpeechGenerationError
from app.services.session_store import VisitorSession

logger = setup_logger(__name__)

# Google rejects synthesis input above 5000 bytes; stay well under it
MAX_INPUT_BYTES = 4000

_SENTENCE_END = re.compile(r"(?<=[.!?;:])\s+|(?<=[。！？])\s*")


def _cut_at_byte_limit(word: str, max_bytes: int) -> List[str]:
    """Cut a single unspaced run of text between characters."""
    if len(word.encode("utf-8")) <= max_bytes:
        return [word]
    parts: List[str] = []
    current = ""
    size = 0
    for char in word:
        char_size = len(char.encode("utf-8"))
        if current and size + char_size > max_bytes:
            parts.append(current)
            current, size = "", 0
        current += char
        size += char_size
    if current:
        parts.append(current)
    return parts


def setup_google_credentials() -> Optional[str]:
    """Set up Google Cloud credentials from environment."""
    credentials_json = settings.GOOGLE_CLOUD_CREDENTIALS_JSON
    if credentials_json:
        try:
            parsed = json.loads(credentials_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"GOOGLE_CLOUD_CREDENTIALS_JSON is not valid JSON: {e}")
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump(parsed, f)
        os.environ['GOOGLE_APPLICATION_CREDENTIALS'] = f.name
        return f.name
    credentials_path = settings.GOOGLE_APPLICATION_CREDENTIALS or os.getenv('GOOGLE_APPLICATION_CREDENTIALS')
    if credentials_path:
        return credentials_path
    # Fall through to Application Default Credentials (gcloud, metadata server)
    return None


def split_for_synthesis(text: str, max_bytes: int = MAX_INPUT_BYTES) -> List[str]:
    """
    Split text into chunks whose UTF-8 size stays under ``max_bytes``.

    Sentences are kept whole where possible; a sentence that alone exceeds
    the limit is split between words, and a word that still exceeds it
    (unspaced scripts such as Chinese) between characters.
    """
    text = " ".join(text.split())
    if not text:
        return []
    if len(text.encode("utf-8")) <= max_bytes:
        return [text]

    pieces: List[str] = []
    for sentence in _SENTENCE_END.split(text):
        if not sentence:
            continue
        if len(sentence.encode("utf-8")) <= max_bytes:
            pieces.append(sentence)
            continue
        word_chunk = ""
        for word in sentence.split(" "):
            for part in _cut_at_byte_limit(word, max_bytes):
                candidate = f"{word_chunk} {part}".strip()
                if word_chunk and len(candidate.encode("utf-8")) > max_bytes:
                    pieces.append(word_chunk)
                    word_chunk = part
                else:
                    word_chunk = candidate
        if word_chunk:
            pieces.append(word_chunk)

    chunks: List[str] = []
    current = ""
    for piece in pieces:
        candidate = f"{current} {piece}".strip()
        if current and len(candidate.encode("utf-8")) > max_bytes:
            chunks.append(current)
            current = piece
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


class SpeechService:
    """Synthesizes MP3 narration for passages and companion replies."""

    def __init__(self):
        self.voice_name = settings.TTS_VOICE_NAME
        self.language_code = settings.TTS_LANGUAGE_CODE
        self.speaking_rate = settings.TTS_SPEAKING_RATE
        self._client: Optional[texttospeech.TextToSpeechClient] = None

    @property
    def client(self) -> texttospeech.TextToSpeechClient:
        if self._client is None:
            setup_google_credentials()
            self._client = texttospeech.TextToSpeechClient()
            logger.info(f"Text-to-speech client initialized (voice {self.voice_name})")
        return self._client

    def _synthesize_chunk(self, chunk: str) -> bytes:
        synthesis_input = texttospeech.SynthesisInput(text=chunk)
        voice = texttospeech.VoiceSelectionParams(
            language_code=self.language_code,
            name=self.voice_name,
        )
        audio_config = texttospeech.AudioConfig(
            audio_encoding=texttospeech.AudioEncoding.MP3,
            speaking_rate=self.speaking_rate,
        )
        response = self.client.synthesize_speech(
            input=synthesis_input, voice=voice, audio_config=audio_config
        )
        return response.audio_content

    def synthesize(self, text: str) -> bytes:
        """Blocking synthesis of the whole text; MP3 frames of each chunk are concatenated."""
        chunks = split_for_synthesis(text)
        if not chunks:
            raise SpeechGenerationError("Nothing to synthesize", error_code="EMPTY_TEXT")
        try:
            audio = b"".join(self._synthesize_chunk(chunk) for chunk in chunks)
        except ConfigurationError:
            raise
        except Exception as e:
            raise SpeechGenerationError(f"Speech synthesis failed: {e}")
        logger.info(f"Synthesized {len(chunks)} chunk(s), {len(audio)} bytes of audio")
        return audio

    async def generate_speech(self, text: str) -> Optional[bytes]:
        """Narrate ``text``; returns MP3 bytes, or None when synthesis fails."""
        try:
            async with with_concurrency_limit(SPEECH_SEMAPHORE, "speech_synthesis"):
                return await asyncio.to_thread(self.synthesize, text)
        except Exception as e:
            logger.error(f"Speech generation failed: {e}")
            return None

    async def speak_message(self, session: VisitorSession, index: int) -> Optional[bytes]:
        """
        Read a companion reply aloud.

        Only model messages can be spoken, and only one at a time per session.
        """
        if index < 0 or index >= len(session.messages):
            raise ChatbotError(f"No message at position {index}", error_code="MESSAGE_NOT_FOUND")
        message = session.messages[index]
        if message.role != "model":
            raise ChatbotError("Only companion replies can be read aloud", error_code="NOT_A_REPLY")

        async with widget_guard(session.busy, SPEECH_WIDGET):
            session.speaking_index = index
            try:
                return await self.generate_speech(message.text)
            finally:
                session.speaking_index = None


# Global speech service; the Google client is created on first use
speech_service = SpeechService()
