from __future__ import annotations

import struct

import pytest

DEFAULT_HEADER = bytes.fromhex("01 10 09 18 19 00 FF 00 00 00")


def make_row(index: int, item_id: int, reserved: bytes = bytes(8), index_dup: int | None = None) -> bytes:
    """テスト用の 14 バイト行。reserved は offset 2 (2 バイト) + offset 6..11 (6 バイト)"""
    assert len(reserved) == 8
    dup = index if index_dup is None else index_dup
    return (
        struct.pack("<H", index)
        + reserved[:2]
        + struct.pack("<H", item_id)
        + reserved[2:]
        + struct.pack("<H", dup)
    )


@pytest.fixture
def single_row_buffer() -> bytes:
    return DEFAULT_HEADER + bytes.fromhex("00 00 00 00 05 00 00 00 00 00 00 00 00 00")


@pytest.fixture
def opaque_buffer() -> bytes:
    """予約領域にゴミが入っているが、index は通し番号になっている正常なファイル"""
    header = bytes.fromhex("AA BB CC DD EE FF 10 20 30 40")
    rows = [
        make_row(0, 0x0101, bytes.fromhex("11 22 33 44 55 66 77 88")),
        make_row(1, 0x0202, bytes.fromhex("99 AA BB CC DD EE FF 01")),
        make_row(2, 0xFFFF, bytes.fromhex("01 02 03 04 05 06 07 08")),
    ]
    return header + b"".join(rows)


@pytest.fixture
def unnumbered_buffer() -> bytes:
    """index が通し番号になっていない（前後で食い違ってもいる）ファイル"""
    rows = [
        make_row(7, 0x0101),
        make_row(3, 0x0202, index_dup=9),
        make_row(0, 0x0303),
    ]
    return DEFAULT_HEADER + b"".join(rows)
