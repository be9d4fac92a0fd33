"""
Tests for the per-part transfer headers.
"""
import hashlib
import re
from datetime import datetime, timedelta, timezone

from botocore.auth import EMPTY_SHA256_HASH

from asset_uploader.headers import (
    ALGORITHM_HEADER,
    CONTENT_SHA256_HEADER,
    DATE_HEADER,
    TransferHeaderBuilder,
)


def test_headers_contain_real_payload_hash():
    builder = TransferHeaderBuilder()
    data = b"part one content"

    headers = builder.build(data)

    assert headers[CONTENT_SHA256_HEADER] == hashlib.sha256(data).hexdigest()
    assert headers[CONTENT_SHA256_HEADER] != "UNSIGNED-PAYLOAD"
    assert headers[ALGORITHM_HEADER] == "AWS4-HMAC-SHA256"


def test_different_content_gives_different_hash():
    builder = TransferHeaderBuilder()

    first = builder.build(b"aaaa")[CONTENT_SHA256_HEADER]
    second = builder.build(b"aaab")[CONTENT_SHA256_HEADER]

    assert first != second


def test_empty_part_hashes_empty_bytes():
    headers = TransferHeaderBuilder().build(b"")

    assert headers[CONTENT_SHA256_HEADER] == EMPTY_SHA256_HASH


def test_hash_accepts_memoryview():
    data = b"some bytes to send"

    headers = TransferHeaderBuilder().build(memoryview(data)[5:10])

    assert headers[CONTENT_SHA256_HEADER] == hashlib.sha256(data[5:10]).hexdigest()


def test_date_header_format():
    clock = lambda: datetime(2023, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)

    headers = TransferHeaderBuilder(clock=clock).build(b"x")

    assert headers[DATE_HEADER] == "20230102T030405Z"


def test_date_header_is_converted_to_utc():
    tz = timezone(timedelta(hours=2))
    clock = lambda: datetime(2023, 1, 2, 1, 0, 0, tzinfo=tz)

    headers = TransferHeaderBuilder(clock=clock).build(b"x")

    assert headers[DATE_HEADER] == "20230101T230000Z"


def test_date_header_taken_at_build_time():
    times = iter([
        datetime(2023, 1, 1, 0, 0, 0, tzinfo=timezone.utc),
        datetime(2023, 1, 1, 0, 0, 7, tzinfo=timezone.utc),
    ])
    builder = TransferHeaderBuilder(clock=lambda: next(times))

    first = builder.build(b"a")[DATE_HEADER]
    second = builder.build(b"b")[DATE_HEADER]

    assert first == "20230101T000000Z"
    assert second == "20230101T000007Z"


def test_default_clock_is_utc_now():
    headers = TransferHeaderBuilder().build(b"x")

    assert re.fullmatch(r"\d{8}T\d{6}Z", headers[DATE_HEADER])
