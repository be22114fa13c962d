# src/mhwshopeditor/shop_file.py

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Sequence

from mhwshopeditor.models.shop_list import ShopListDocument
from mhwshopeditor.parser.shop_list_codec import decode, encode

_logger = logging.getLogger(__name__)

SHOP_LIST_SUFFIX = ".slt"


def load_shop_list(path: Path) -> ShopListDocument:
    """shopList ファイルを読み込んで ShopListDocument を返す。OSError はそのまま上げる。"""
    path = Path(path)
    raw = path.read_bytes()
    document = decode(raw)
    _logger.info("loaded %s (%d slots)", path, document.slot_count)
    return document


def backup_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".bak")


def save_shop_list(
    path: Path,
    document: ShopListDocument,
    slot_ids: Sequence[int],
    *,
    backup: bool = True,
) -> Path:
    """
    slot_ids を document をテンプレートにしてエンコードし、path に書き出す。

    - エンコードに失敗した場合はファイルに一切触らない
    - backup=True なら、既存ファイルを最初の1回だけ <name>.bak に退避する
    - 一時ファイルに書いてから os.replace で差し替える
    """
    path = Path(path)
    data = encode(document, slot_ids)

    if backup and path.exists():
        bak = backup_path_for(path)
        if not bak.exists():
            shutil.copy2(path, bak)
            _logger.info("backup created: %s", bak)

    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    finally:
        if tmp.exists():
            tmp.unlink()

    _logger.info("saved %s (%d slots, %d bytes)", path, len(slot_ids), len(data))
    return path
