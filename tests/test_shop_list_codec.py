from __future__ import annotations

import struct

import pytest

from mhwshopeditor.models.shop_list import (
    DEFAULT_HEADER,
    MAX_SLOTS,
    ShopListDocument,
    ShopRow,
)
from mhwshopeditor.parser.errors import (
    CapacityExceededError,
    InvalidArgumentError,
    MalformedInputError,
    ShopListError,
)
from mhwshopeditor.parser.shop_list_codec import (
    create_default_document,
    decode,
    encode,
)


def _u16(buf: bytes, offset: int) -> int:
    return struct.unpack_from("<H", buf, offset)[0]


def _row(buf: bytes, i: int) -> bytes:
    start = 10 + 14 * i
    return buf[start : start + 14]


def test_decode_single_row(single_row_buffer: bytes) -> None:
    doc = decode(single_row_buffer)

    assert doc.header == single_row_buffer[:10]
    assert len(doc.rows) == 1
    assert doc.item_ids == (5,)
    assert doc.rows[0].raw == single_row_buffer[10:]


def test_encode_example_replaces_item_and_keeps_template(single_row_buffer: bytes) -> None:
    doc = decode(single_row_buffer)

    out = encode(doc, [7])

    assert out[:10] == single_row_buffer[:10]
    assert len(out) == 24
    row = _row(out, 0)
    assert row[0:2] == b"\x00\x00"
    assert row[12:14] == b"\x00\x00"
    assert row[4:6] == b"\x07\x00"
    assert row[2:4] == single_row_buffer[12:14]
    assert row[6:12] == single_row_buffer[16:22]


def test_round_trip_is_identity(single_row_buffer: bytes, opaque_buffer: bytes) -> None:
    for data in (single_row_buffer, opaque_buffer):
        doc = decode(data)
        assert encode(doc, doc.item_ids) == data


def test_round_trip_keeps_opaque_bytes() -> None:
    header = bytes(range(10))
    rows = b""
    for i in range(5):
        row = bytearray(bytes([0x40 + i] * 14))
        struct.pack_into("<H", row, 0, i)
        struct.pack_into("<H", row, 12, i)
        rows += bytes(row)
    data = header + rows

    doc = decode(data)
    assert encode(doc, doc.item_ids) == data


def test_decode_preserves_rows_and_ids(opaque_buffer: bytes, unnumbered_buffer: bytes) -> None:
    doc = decode(opaque_buffer)

    assert doc.item_ids == (0x0101, 0x0202, 0xFFFF)
    assert b"".join(r.raw for r in doc.rows) == opaque_buffer[10:]

    doc = decode(unnumbered_buffer)
    assert doc.rows[1].index == 3
    assert doc.rows[1].index_dup == 9


def test_encode_rewrites_indexes(unnumbered_buffer: bytes) -> None:
    doc = decode(unnumbered_buffer)

    out = encode(doc, doc.item_ids)

    for i in range(3):
        assert _u16(_row(out, i), 0) == i
        assert _u16(_row(out, i), 12) == i


def test_header_is_preserved(opaque_buffer: bytes) -> None:
    doc = decode(opaque_buffer)

    assert encode(doc, [])[:10] == opaque_buffer[:10]
    assert encode(doc, [1, 2, 3, 4, 5])[:10] == opaque_buffer[:10]


@pytest.mark.parametrize("count", [0, 1, 2, 3, 10, 256])
def test_length_law(opaque_buffer: bytes, count: int) -> None:
    doc = decode(opaque_buffer)
    assert len(encode(doc, list(range(count)))) == 10 + 14 * count


def test_shrink_drops_trailing_rows(opaque_buffer: bytes) -> None:
    doc = decode(opaque_buffer)

    out = encode(doc, [0x0101])

    assert len(out) == 24
    # 先頭行のテンプレートはそのまま
    assert _row(out, 0)[2:4] == _row(opaque_buffer, 0)[2:4]
    assert _row(out, 0)[6:12] == _row(opaque_buffer, 0)[6:12]


def test_reorder_keeps_template_by_position(opaque_buffer: bytes) -> None:
    doc = decode(opaque_buffer)

    out = encode(doc, [0xFFFF, 0x0202, 0x0101])

    # テンプレートは位置で決まる（ID についていくわけではない）
    assert _row(out, 0)[6:12] == _row(opaque_buffer, 0)[6:12]
    assert _u16(_row(out, 0), 4) == 0xFFFF
    assert _u16(_row(out, 2), 4) == 0x0101


def test_identifier_is_truncated_to_16_bits() -> None:
    doc = create_default_document()

    out = encode(doc, [0x1FFFF])

    assert _row(out, 0)[4:6] == b"\xFF\xFF"


def test_growth_rows_are_zero_filled(opaque_buffer: bytes) -> None:
    doc = decode(opaque_buffer)

    out = encode(doc, [1, 2, 3, 0x1234, 0x5678])

    for i, item_id in ((3, 0x1234), (4, 0x5678)):
        row = _row(out, i)
        assert row[2:4] == b"\x00\x00"
        assert row[6:12] == bytes(6)
        assert _u16(row, 0) == i
        assert _u16(row, 12) == i
        assert _u16(row, 4) == item_id


def test_capacity_boundary() -> None:
    doc = create_default_document()

    out = encode(doc, [1] * MAX_SLOTS)
    assert len(out) == 10 + 14 * 256

    with pytest.raises(CapacityExceededError) as excinfo:
        encode(doc, [1] * (MAX_SLOTS + 1))
    assert excinfo.value.limit == 256
    assert "256" in str(excinfo.value)


def test_last_slot_gets_its_own_index() -> None:
    doc = create_default_document()
    out = encode(doc, list(range(256)))
    assert _u16(_row(out, 255), 0) == 255
    assert _u16(_row(out, 255), 12) == 255


def test_encode_does_not_mutate_document(opaque_buffer: bytes) -> None:
    doc = decode(opaque_buffer)
    rows_before = tuple(r.raw for r in doc.rows)

    encode(doc, [9, 9, 9, 9, 9, 9])
    encode(doc, [])

    assert tuple(r.raw for r in doc.rows) == rows_before
    assert doc.item_ids == (0x0101, 0x0202, 0xFFFF)
    # 何度エンコードしても同じ結果
    assert encode(doc, doc.item_ids) == encode(doc, doc.item_ids)


@pytest.mark.parametrize("length", [0, 9, 11, 25, 10 + 14 * 3 - 1])
def test_decode_rejects_malformed_sizes(length: int) -> None:
    with pytest.raises(MalformedInputError):
        decode(bytes(length))


def test_decode_header_only_and_aligned_payload() -> None:
    assert decode(bytes(10)).rows == ()
    assert len(decode(bytes(24)).rows) == 1


def test_decode_tolerates_more_than_max_slots() -> None:
    data = DEFAULT_HEADER + bytes(14 * 300)

    doc = decode(data)

    assert len(doc.rows) == 300
    # そのまま書き戻そうとすると上限エラー
    with pytest.raises(CapacityExceededError):
        encode(doc, doc.item_ids)


def test_decode_rejects_non_buffer_arguments() -> None:
    for value in (24, "0110", [1, 2, 3]):
        with pytest.raises(InvalidArgumentError):
            decode(value)


def test_missing_arguments_raise_invalid_argument() -> None:
    doc = create_default_document()

    with pytest.raises(InvalidArgumentError):
        decode(None)
    with pytest.raises(InvalidArgumentError):
        encode(None, [])
    with pytest.raises(InvalidArgumentError):
        encode(doc, None)


def test_error_hierarchy() -> None:
    assert issubclass(InvalidArgumentError, TypeError)
    assert issubclass(MalformedInputError, ValueError)
    assert issubclass(CapacityExceededError, ValueError)
    for exc in (InvalidArgumentError, MalformedInputError, CapacityExceededError):
        assert issubclass(exc, ShopListError)


def test_default_document() -> None:
    doc = create_default_document()

    assert doc.header == bytes.fromhex("01 10 09 18 19 00 FF 00 00 00")
    assert doc.rows == ()
    assert doc.item_ids == ()
    assert encode(doc, []) == doc.header


def test_decode_accepts_bytearray(single_row_buffer: bytes) -> None:
    doc = decode(bytearray(single_row_buffer))
    assert doc.item_ids == (5,)


def test_document_rejects_inconsistent_ids() -> None:
    row = ShopRow(bytes(14))
    with pytest.raises(ValueError):
        ShopListDocument(header=DEFAULT_HEADER, rows=(row,), item_ids=())
    with pytest.raises(ValueError):
        ShopListDocument(header=DEFAULT_HEADER, rows=(row,), item_ids=(3,))
    with pytest.raises(ValueError):
        ShopListDocument(header=b"short")


def test_row_with_slot_only_touches_known_fields() -> None:
    row = ShopRow(bytes(range(14)))

    new = row.with_slot(0x0102, 0x30405)

    assert new.index == 0x0102
    assert new.index_dup == 0x0102
    assert new.item_id == 0x0405
    assert new.raw[2:4] == row.raw[2:4]
    assert new.raw[6:12] == row.raw[6:12]
    assert row.raw == bytes(range(14))


def test_row_length_is_checked() -> None:
    with pytest.raises(ValueError):
        ShopRow(bytes(13))
