"""Streaming extraction of a single file field from a multipart body."""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterable, AsyncIterator

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from dualstore.upload.exceptions import MultipartError, NoFileError, SizeLimitExceeded

logger = logging.getLogger(__name__)

FILE_FIELD = "file"
DEFAULT_FILENAME = "upload.tmp"


class _Event(Enum):
    HEADERS = "headers"
    DATA = "data"
    PART_END = "part_end"
    END = "end"


@dataclass
class FilePart:
    """The file field found in a multipart body."""

    filename: str
    chunks: AsyncIterator[bytes]


def _decode(value: bytes | None) -> str | None:
    if value is None:
        return None
    return value.decode("utf-8", errors="replace")


class _ParserCallbacks:
    """Turns python-multipart callbacks into a queue of events."""

    def __init__(self):
        self.events: deque[tuple[_Event, object]] = deque()
        self._header_field = bytearray()
        self._header_value = bytearray()
        self._headers: dict[bytes, bytes] = {}

    def on_part_begin(self) -> None:
        self._headers = {}

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        self._headers[bytes(self._header_field).lower()] = bytes(self._header_value)
        self._header_field.clear()
        self._header_value.clear()

    def on_headers_finished(self) -> None:
        _, options = parse_options_header(self._headers.get(b"content-disposition"))
        name = _decode(options.get(b"name"))
        filename = _decode(options.get(b"filename"))
        self.events.append((_Event.HEADERS, (name, filename)))

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self.events.append((_Event.DATA, data[start:end]))

    def on_part_end(self) -> None:
        self.events.append((_Event.PART_END, None))

    def on_end(self) -> None:
        self.events.append((_Event.END, None))

    def as_dict(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_end": self.on_end,
        }


class MultipartExtractor:
    """Finds the file field in a streamed ``multipart/form-data`` body.

    The body is fed to the parser chunk by chunk as the transport delivers
    it. Fields before the file field are skipped, and the file's bytes are
    handed out lazily through ``FilePart.chunks``. When ``max_body_size`` is
    set, the raw body may not grow past it, whichever part is being read.
    """

    def __init__(
        self,
        content_type: str | None,
        body: AsyncIterable[bytes],
        field_name: str = FILE_FIELD,
        default_filename: str = DEFAULT_FILENAME,
        max_body_size: int | None = None,
    ):
        self._boundary = self._parse_boundary(content_type)
        self._body = body
        self.field_name = field_name
        self.default_filename = default_filename
        self.max_body_size = max_body_size

    @staticmethod
    def _parse_boundary(content_type: str | None) -> bytes:
        if not content_type:
            raise MultipartError("Missing Content-Type header, expected multipart/form-data")

        media_type, options = parse_options_header(content_type)
        if media_type != b"multipart/form-data":
            raise MultipartError(
                f"Unsupported Content-Type {media_type.decode('latin-1')!r}, expected multipart/form-data"
            )

        boundary = options.get(b"boundary")
        if not boundary:
            raise MultipartError("Missing boundary in multipart/form-data Content-Type")
        return boundary

    async def extract(self) -> FilePart:
        """Consume the body up to the file field and return it.

        Raises:
            NoFileError: If the body holds no part named ``field_name``
            MultipartError: If the body is malformed or truncated
            SizeLimitExceeded: If the body grows past ``max_body_size``
        """
        events = self._events()
        async for kind, payload in events:
            if kind is not _Event.HEADERS:
                continue
            name, filename = payload
            if name != self.field_name:
                logger.debug("Skipping multipart field", extra={"field_name": name})
                continue

            filename = filename or self.default_filename
            logger.debug("Found file field", extra={"original_filename": filename})
            return FilePart(filename=filename, chunks=self._part_chunks(events))

        raise NoFileError(self.field_name)

    async def _part_chunks(self, events: AsyncIterator[tuple[_Event, object]]) -> AsyncIterator[bytes]:
        try:
            async for kind, payload in events:
                if kind is _Event.DATA:
                    yield payload
                elif kind is _Event.PART_END:
                    return
        finally:
            await events.aclose()

    async def _events(self) -> AsyncIterator[tuple[_Event, object]]:
        callbacks = _ParserCallbacks()
        parser = MultipartParser(self._boundary, callbacks.as_dict())
        finished = False
        received = 0

        async for chunk in self._body:
            if not chunk:
                continue

            received += len(chunk)
            if self.max_body_size is not None and received > self.max_body_size:
                logger.warning(
                    "Request body exceeded size limit",
                    extra={"max_body_size": self.max_body_size, "bytes_received": received},
                )
                raise SizeLimitExceeded(self.max_body_size)

            try:
                parser.write(chunk)
            except MultipartParseError as e:
                raise MultipartError(f"Malformed multipart body: {e}") from e

            while callbacks.events:
                event = callbacks.events.popleft()
                if event[0] is _Event.END:
                    finished = True
                yield event

        if not finished:
            raise MultipartError("Multipart body ended before the closing boundary")
