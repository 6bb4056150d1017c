"""
Body decoders for interest list submissions.

The form posts either JSON, multipart/form-data or url-encoded data depending on
how the page submits it. Each decoder turns the raw request body into the same
normalized Submission so the rest of the pipeline never cares which one was used.
"""

import json
import logging
from typing import Any, AsyncIterator, Mapping, Optional
from urllib.parse import parse_qsl

from starlette.datastructures import Headers, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from app.core.errors import BodyDecodeError
from app.models.submission import OPTIONAL_FIELDS, REQUIRED_FIELDS, Submission

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> Optional[str]:
    # 0, 0.0 and false count as absent, like null
    if value is None or (not isinstance(value, str) and not value):
        return None
    if value is True:
        return "true"
    return value if isinstance(value, str) else str(value)


def build_submission(fields: Mapping[str, Any]) -> Submission:
    """
    Normalize decoded key/value pairs into a Submission.

    Missing required fields become "" and missing or empty optional fields
    become None, whatever the source encoding was.
    """
    data = {}
    for name in REQUIRED_FIELDS:
        data[name] = _as_text(fields.get(name)) or ""
    for name in OPTIONAL_FIELDS:
        data[name] = _as_text(fields.get(name)) or None
    return Submission(**data)


class BodyDecoder:
    """Turns a raw request body into a Submission"""
    name = "base"

    async def decode(self, body: bytes) -> Submission:
        raise NotImplementedError


class JsonBodyDecoder(BodyDecoder):
    name = "json"

    async def decode(self, body: bytes) -> Submission:
        try:
            payload = json.loads(body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BodyDecodeError(f"Invalid JSON body: {str(e)}") from e

        if not isinstance(payload, dict):
            raise BodyDecodeError(f"JSON body must be an object, got {type(payload).__name__}")

        return build_submission(payload)


class MultipartBodyDecoder(BodyDecoder):
    name = "multipart"

    def __init__(self, content_type: str):
        self.content_type = content_type

    async def _stream(self, body: bytes) -> AsyncIterator[bytes]:
        yield body

    async def decode(self, body: bytes) -> Submission:
        parser = MultiPartParser(Headers({"content-type": self.content_type}), self._stream(body))
        try:
            form = await parser.parse()
        except (MultiPartException, ValueError) as e:
            raise BodyDecodeError(f"Invalid multipart body: {str(e)}") from e

        fields = {}
        try:
            for name, value in form.multi_items():
                if isinstance(value, UploadFile):
                    content = await value.read()
                    fields[name] = content.decode("utf-8", errors="replace")
                else:
                    fields[name] = value
        finally:
            await form.close()

        logger.debug(f"Multipart fields received: {sorted(fields)}")
        return build_submission(fields)


class UrlEncodedBodyDecoder(BodyDecoder):
    name = "urlencoded"

    async def decode(self, body: bytes) -> Submission:
        fields = {}
        # First occurrence wins for repeated keys
        for key, value in parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True):
            fields.setdefault(key, value)
        return build_submission(fields)


def decoder_for(content_type: Optional[str]) -> BodyDecoder:
    """Pick the decoder for a Content-Type header; anything unrecognized is treated as url-encoded."""
    content_type = content_type or ""
    lowered = content_type.lower()
    if "application/json" in lowered:
        return JsonBodyDecoder()
    if "multipart/form-data" in lowered:
        return MultipartBodyDecoder(content_type)
    return UrlEncodedBodyDecoder()


async def decode_submission(content_type: Optional[str], body: bytes) -> Submission:
    decoder = decoder_for(content_type)
    logger.info(f"Decoding submission body ({len(body)} bytes) as {decoder.name}")
    return await decoder.decode(body)
