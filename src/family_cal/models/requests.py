"""Tagged input submitted to the parsing service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from family_cal.exceptions import InvalidInputError

InputKind = Literal["text", "voice", "image"]

DEFAULT_AUDIO_MIME = "audio/wav"
DEFAULT_IMAGE_MIME = "image/jpeg"


@dataclass(frozen=True)
class ParseRequest:
    """One user submission: text, a voice recording, or a photo.

    Build instances with :meth:`from_text`, :meth:`from_voice` or
    :meth:`from_image`, which validate the payload.

    Attributes:
        kind: Which input modality this is.
        text: The submitted text (``kind == "text"`` only).
        data: Encoded audio or image bytes (``"voice"``/``"image"`` only).
        mime_type: MIME type of *data*.
    """

    kind: InputKind
    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @classmethod
    def from_text(cls, text: str) -> ParseRequest:
        if not text or not text.strip():
            raise InvalidInputError("Text input must not be empty")
        return cls(kind="text", text=text.strip())

    @classmethod
    def from_voice(cls, audio: bytes, mime_type: str = DEFAULT_AUDIO_MIME) -> ParseRequest:
        if not audio:
            raise InvalidInputError("Voice recording must not be empty")
        return cls(kind="voice", data=bytes(audio), mime_type=mime_type)

    @classmethod
    def from_image(cls, image: bytes, mime_type: str = DEFAULT_IMAGE_MIME) -> ParseRequest:
        if not image:
            raise InvalidInputError("Image must not be empty")
        return cls(kind="image", data=bytes(image), mime_type=mime_type)
