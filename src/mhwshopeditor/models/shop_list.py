# src/mhwshopeditor/models/shop_list.py

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Tuple

HEADER_LENGTH = 10
ROW_LENGTH = 14
MAX_SLOTS = 256

# 既存ファイルが無いときに使うヘッダ（実ファイルの観測値）
DEFAULT_HEADER = bytes((0x01, 0x10, 0x09, 0x18, 0x19, 0x00, 0xFF, 0x00, 0x00, 0x00))

# 行内のオフセット
INDEX_OFFSET = 0
ITEM_ID_OFFSET = 4
INDEX_DUP_OFFSET = 12

_U16 = struct.Struct("<H")


@dataclass(frozen=True)
class ShopRow:
    """
    shopList の1行（14バイト）。

    7 個の little-endian uint16 として並んでいる:
        Index, 0, ItemID, 0, 0, 0, Index

    意味が分かっているのは offset 0 / 4 / 12 だけ。
    それ以外のバイトは中身を解釈せず、そのまま保持する。
    """
    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != ROW_LENGTH:
            raise ValueError(f"row must be {ROW_LENGTH} bytes, got {len(self.raw)}")

    @classmethod
    def blank(cls) -> ShopRow:
        """テンプレートが無い新規スロット用のゼロ埋め行"""
        return cls(bytes(ROW_LENGTH))

    @property
    def index(self) -> int:
        return _U16.unpack_from(self.raw, INDEX_OFFSET)[0]

    @property
    def index_dup(self) -> int:
        return _U16.unpack_from(self.raw, INDEX_DUP_OFFSET)[0]

    @property
    def item_id(self) -> int:
        return _U16.unpack_from(self.raw, ITEM_ID_OFFSET)[0]

    def with_slot(self, index: int, item_id: int) -> ShopRow:
        """
        この行をテンプレートとして、index と item_id だけを書き換えた新しい行を返す。

        どちらも 16bit に切り詰める（ファイル上のフィールド幅に合わせる）。
        """
        buf = bytearray(self.raw)
        _U16.pack_into(buf, INDEX_OFFSET, index & 0xFFFF)
        _U16.pack_into(buf, INDEX_DUP_OFFSET, index & 0xFFFF)
        _U16.pack_into(buf, ITEM_ID_OFFSET, item_id & 0xFFFF)
        return ShopRow(bytes(buf))


@dataclass(frozen=True)
class ShopListDocument:
    """
    shopList ファイル1つ分を読み込んだ結果。

    - header:   先頭10バイト（中身は解釈しない）
    - rows:     ファイル順の行一覧
    - item_ids: 各行から取り出したアイテムID（rows と同じ長さ・同じ順）

    編集は「新しいアイテムID列」として外側で表現し、このオブジェクト自体は変更しない。
    """
    header: bytes
    rows: Tuple[ShopRow, ...] = field(default_factory=tuple)
    item_ids: Tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.header) != HEADER_LENGTH:
            raise ValueError(f"header must be {HEADER_LENGTH} bytes, got {len(self.header)}")
        if len(self.rows) != len(self.item_ids):
            raise ValueError("rows and item_ids must have the same length")
        for row, item_id in zip(self.rows, self.item_ids):
            if row.item_id != item_id:
                raise ValueError("item_ids must match the item field of each row")

    @classmethod
    def from_rows(cls, header: bytes, rows: Tuple[ShopRow, ...]) -> ShopListDocument:
        """行一覧から item_ids を導出してドキュメントを作る"""
        return cls(
            header=bytes(header),
            rows=tuple(rows),
            item_ids=tuple(r.item_id for r in rows),
        )

    @property
    def slot_count(self) -> int:
        return len(self.rows)
