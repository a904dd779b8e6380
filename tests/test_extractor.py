"""Tests for multipart file extraction."""

import pytest

from dualstore.upload.exceptions import MultipartError, NoFileError, SizeLimitExceeded
from dualstore.upload.extractor import DEFAULT_FILENAME, MultipartExtractor

from conftest import BOUNDARY, MULTIPART_CONTENT_TYPE, build_multipart, stream_bytes


async def _collect(chunks) -> bytes:
    data = b""
    async for chunk in chunks:
        data += chunk
    return data


@pytest.mark.asyncio
async def test_extract_file_field():
    body = build_multipart([("file", "hello.txt", b"hello world")])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body))

    part = await extractor.extract()

    assert part.filename == "hello.txt"
    assert await _collect(part.chunks) == b"hello world"


@pytest.mark.asyncio
async def test_extract_skips_other_fields():
    body = build_multipart(
        [
            ("description", None, b"a holiday photo"),
            ("attachment", "other.bin", b"not this one"),
            ("file", "photo.jpg", b"\xff\xd8\xff\xe0binary"),
        ]
    )
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body, chunk_size=3))

    part = await extractor.extract()

    assert part.filename == "photo.jpg"
    assert await _collect(part.chunks) == b"\xff\xd8\xff\xe0binary"


@pytest.mark.asyncio
async def test_extract_binary_content_containing_crlf():
    content = b"line one\r\nline two\r\n--not-the-boundary\r\n"
    body = build_multipart([("file", "data.bin", content)])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body, chunk_size=5))

    part = await extractor.extract()

    assert await _collect(part.chunks) == content


@pytest.mark.asyncio
async def test_extract_missing_filename_uses_default():
    body = build_multipart([("file", None, b"anonymous")])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body))

    part = await extractor.extract()

    assert part.filename == DEFAULT_FILENAME
    assert await _collect(part.chunks) == b"anonymous"


@pytest.mark.asyncio
async def test_extract_empty_filename_uses_default():
    body = build_multipart([("file", "", b"x")])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body))

    part = await extractor.extract()

    assert part.filename == DEFAULT_FILENAME


@pytest.mark.asyncio
async def test_extract_empty_file_is_not_missing():
    body = build_multipart([("file", "empty.txt", b"")])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body))

    part = await extractor.extract()

    assert part.filename == "empty.txt"
    assert await _collect(part.chunks) == b""


@pytest.mark.asyncio
async def test_extract_without_file_field_raises_no_file_error():
    body = build_multipart([("document", "a.txt", b"wrong field")])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body))

    with pytest.raises(NoFileError):
        await extractor.extract()


@pytest.mark.asyncio
async def test_extract_truncated_body_raises_multipart_error():
    body = build_multipart([("file", "cut.txt", b"0123456789" * 10)], close=False)
    body = body[:-60]
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body))

    part = await extractor.extract()

    with pytest.raises(MultipartError):
        await _collect(part.chunks)


@pytest.mark.asyncio
async def test_extract_empty_body_raises_multipart_error():
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(b""))

    with pytest.raises(MultipartError):
        await extractor.extract()


@pytest.mark.parametrize(
    "content_type",
    [
        None,
        "",
        "application/json",
        "application/x-www-form-urlencoded",
        "multipart/form-data",
    ],
)
def test_extractor_rejects_bad_content_type(content_type):
    with pytest.raises(MultipartError):
        MultipartExtractor(content_type, stream_bytes(b""))


def test_extractor_accepts_quoted_boundary():
    extractor = MultipartExtractor(
        f'multipart/form-data; boundary="{BOUNDARY}"', stream_bytes(b"")
    )

    assert extractor._boundary == BOUNDARY.encode()


@pytest.mark.asyncio
async def test_large_field_before_file_exceeds_body_limit():
    body = build_multipart([("junk", None, b"j" * 50_000), ("file", "hello.txt", b"0123456789")])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body, chunk_size=512), max_body_size=1000)

    with pytest.raises(SizeLimitExceeded) as exc_info:
        await extractor.extract()

    assert exc_info.value.limit == 1000


@pytest.mark.asyncio
async def test_body_limit_applies_while_reading_file():
    body = build_multipart([("file", "big.bin", b"x" * 5000)])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body, chunk_size=256), max_body_size=1000)

    part = await extractor.extract()

    with pytest.raises(SizeLimitExceeded):
        await _collect(part.chunks)


@pytest.mark.asyncio
async def test_body_exactly_at_limit_is_accepted():
    body = build_multipart([("file", "hello.txt", b"hello world")])
    extractor = MultipartExtractor(MULTIPART_CONTENT_TYPE, stream_bytes(body), max_body_size=len(body))

    part = await extractor.extract()

    assert await _collect(part.chunks) == b"hello world"
