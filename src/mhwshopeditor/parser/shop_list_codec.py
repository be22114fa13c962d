# src/mhwshopeditor/parser/shop_list_codec.py
"""
shopList (*.slt) のバイナリ読み書き。

レイアウト:
  - 先頭 10 バイト: ヘッダ（そのままコピー）
  - 以降 14 バイトごとに 1 行 = 1 スロット
  - 行の中身 (uint16 x 7, little-endian): Index, 0, ItemID, 0, 0, 0, Index
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from mhwshopeditor.models.shop_list import (
    DEFAULT_HEADER,
    HEADER_LENGTH,
    MAX_SLOTS,
    ROW_LENGTH,
    ShopListDocument,
    ShopRow,
)
from mhwshopeditor.parser.errors import (
    CapacityExceededError,
    InvalidArgumentError,
    MalformedInputError,
)

_logger = logging.getLogger(__name__)


def decode(data: Optional[bytes]) -> ShopListDocument:
    """
    バイト列を ShopListDocument に変換する。

    行数の上限はここではチェックしない（既に 256 行を超えたファイルもそのまま読む）。
    """
    if data is None:
        raise InvalidArgumentError("data is required")

    try:
        data = memoryview(data).tobytes()
    except TypeError as e:
        raise InvalidArgumentError(f"data must be a bytes-like object, not {type(data).__name__}") from e
    if len(data) < HEADER_LENGTH:
        raise MalformedInputError("File too small to be a valid shop list.")

    payload_length = len(data) - HEADER_LENGTH
    if payload_length % ROW_LENGTH != 0:
        raise MalformedInputError(
            f"Unexpected payload size; rows must be {ROW_LENGTH}-byte aligned."
        )

    header = data[:HEADER_LENGTH]
    rows = tuple(
        ShopRow(data[offset : offset + ROW_LENGTH])
        for offset in range(HEADER_LENGTH, len(data), ROW_LENGTH)
    )

    _logger.debug("decoded shop list: %d rows", len(rows))
    return ShopListDocument.from_rows(header, rows)


def encode(
    document: Optional[ShopListDocument],
    slot_ids: Optional[Sequence[int]],
) -> bytes:
    """
    document の行をテンプレートにして、slot_ids の並びでバイト列を組み立てる。

    - 行数は len(slot_ids) ちょうど（余ったテンプレート行は捨てる）
    - 足りない分はゼロ埋め行を足す
    - 各行の offset 0/12 に通し番号、offset 4 に ID & 0xFFFF を書き込む
    - それ以外のバイトはテンプレート行のまま
    """
    if document is None:
        raise InvalidArgumentError("document is required")
    if slot_ids is None:
        raise InvalidArgumentError("slot_ids is required")

    slot_ids = list(slot_ids)
    if len(slot_ids) > MAX_SLOTS:
        raise CapacityExceededError(len(slot_ids), MAX_SLOTS)

    templates: List[ShopRow] = list(document.rows)
    while len(templates) < len(slot_ids):
        templates.append(ShopRow.blank())

    out = bytearray(document.header)
    for i, item_id in enumerate(slot_ids):
        out += templates[i].with_slot(i, int(item_id)).raw

    _logger.debug(
        "encoded shop list: %d rows (template rows: %d)",
        len(slot_ids),
        len(document.rows),
    )
    return bytes(out)


def create_default_document() -> ShopListDocument:
    """既存ファイルが無いとき用の空ドキュメント"""
    return ShopListDocument(header=DEFAULT_HEADER)
