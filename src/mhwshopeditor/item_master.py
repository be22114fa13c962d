# src/mhwshopeditor/item_master.py
from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import chardet

_logger = logging.getLogger(__name__)

# アイテム表の読み込み結果をプロセス内でキャッシュするための簡易ストア
# キー: パスのタプル
_ITEM_CACHE: Dict[tuple, List["ItemEntry"]] = {}


@dataclass(frozen=True)
class ItemEntry:
    """
    アイテム表の1件。

    key は "ITEM0A1B" のような形式で、先頭4文字を除いた部分が16進のアイテムID。
    """
    key: str
    name: str

    @property
    def item_id(self) -> int:
        if len(self.key) > 4:
            return int(self.key[4:], 16)
        return 0

    def __str__(self) -> str:
        return self.name


def clear_item_cache() -> None:
    """
    アイテム表のキャッシュをクリアする。

    言語を切り替えた・表ファイルを差し替えた、という場合に呼び出す。
    """
    _ITEM_CACHE.clear()


def _decode_text(raw: bytes) -> str:
    """よく使われるエンコーディングを順に試し、だめなら chardet の推定に任せる"""
    for enc in ("utf-8-sig", "cp932"):
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue

    guess = chardet.detect(raw)
    encoding = guess.get("encoding") or "utf-8"
    _logger.warning("falling back to detected encoding %s", encoding)
    return raw.decode(encoding, errors="replace")


def _detect_delimiter(text: str) -> str:
    """サンプル行から区切り文字を推定."""
    sample = "\n".join(text.splitlines()[:5])
    if "\t" in sample and ("," not in sample or sample.count("\t") >= sample.count(",")):
        return "\t"
    return ","


def _make_entry(key: Any, name: Any) -> Optional[ItemEntry]:
    key_s = str(key or "").strip()
    name_s = str(name or "").strip()
    if not key_s or not name_s:
        return None

    entry = ItemEntry(key=key_s, name=name_s)
    try:
        entry.item_id
    except ValueError:
        _logger.warning("skipping item with non-hex key: %r", key_s)
        return None
    return entry


def _entries_from_json(data: Any) -> List[ItemEntry]:
    pairs: Iterable[tuple] = ()
    if isinstance(data, dict):
        pairs = data.items()
    elif isinstance(data, list):
        pairs = (
            (obj.get("Key"), obj.get("Value"))
            for obj in data
            if isinstance(obj, dict)
        )
    else:
        raise ValueError("item table JSON must be an object or a list")

    entries: List[ItemEntry] = []
    for key, name in pairs:
        entry = _make_entry(key, name)
        if entry is not None:
            entries.append(entry)
    return entries


def _entries_from_text(text: str) -> List[ItemEntry]:
    reader = csv.reader(io.StringIO(text), delimiter=_detect_delimiter(text))

    entries: List[ItemEntry] = []
    for row in reader:
        if len(row) < 2:
            continue
        entry = _make_entry(row[0], row[1])
        if entry is not None:
            entries.append(entry)
    return entries


def load_item_master(paths: list[Path]) -> List[ItemEntry]:
    """
    アイテム表を複数ファイルから読み込み、ItemEntry のリストを返す。

    - .json: {"ITEM0001": "回復薬", ...} か [{"Key": ..., "Value": ...}, ...]
    - それ以外: 1列目キー・2列目名称のタブ / カンマ区切りテキスト
    """
    key = tuple(str(p) for p in paths)
    if key in _ITEM_CACHE:
        return _ITEM_CACHE[key]

    entries: List[ItemEntry] = []
    for path in paths:
        text = _decode_text(Path(path).read_bytes())
        if Path(path).suffix.lower() == ".json":
            entries.extend(_entries_from_json(json.loads(text)))
        else:
            entries.extend(_entries_from_text(text))

    _logger.info("loaded %d items from %d file(s)", len(entries), len(paths))
    _ITEM_CACHE[key] = entries
    return entries


def build_name_lookup(entries: Iterable[ItemEntry]) -> Dict[int, str]:
    """アイテムID -> 表示名。同じIDが複数あれば先に出てきた方を使う"""
    lookup: Dict[int, str] = {}
    for entry in entries:
        lookup.setdefault(entry.item_id, entry.name)
    return lookup


def describe_item(item_id: int, lookup: Dict[int, str]) -> str:
    name = lookup.get(item_id)
    if name is not None:
        return name
    return f"不明なアイテム (0x{item_id:04X})"


def find_item_tables(data_dir: Path, language: str) -> list[Path]:
    """
    data_dir 以下から言語コードに対応するアイテム表を探す。

    例: language="eng" -> items_eng.json / items_eng.csv / items_eng.txt
    """
    found: list[Path] = []
    for suffix in (".json", ".csv", ".tsv", ".txt"):
        candidate = Path(data_dir) / f"items_{language}{suffix}"
        if candidate.is_file():
            found.append(candidate)
    return found
