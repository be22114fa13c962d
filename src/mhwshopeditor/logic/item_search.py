# src/mhwshopeditor/logic/item_search.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from mhwshopeditor.item_master import ItemEntry


@dataclass
class ItemSearchCondition:
    """
    アイテム検索の条件。

    keyword は名称・キーの部分一致、または ID（16進 / #10進）として扱う。
    """
    keyword: str = ""

    def is_empty(self) -> bool:
        return not self.keyword.strip()


def _parse_id_keyword(keyword: str) -> Optional[int]:
    """
    キーワードを ID として解釈できれば int を返す。

    例:
        "0x1a" -> 26
        "1A"   -> 26
        "#26"  -> 26
        "potion" -> None
    """
    s = keyword.strip()
    if s.startswith("#"):
        digits = s[1:]
        return int(digits) if digits.isascii() and digits.isdigit() else None

    if s.lower().startswith("0x"):
        s = s[2:]
    if not s or len(s) > 4:
        return None
    try:
        return int(s, 16)
    except ValueError:
        return None


def match_item(entry: ItemEntry, cond: ItemSearchCondition) -> bool:
    """
    1 件のアイテムが条件にマッチするか判定する。

    - 名称は大文字小文字を無視した部分一致
    - キーも部分一致
    - キーワードが ID として読めれば、ID の完全一致もヒット扱い
    """
    keyword = cond.keyword.strip()
    if not keyword:
        return False

    folded = keyword.casefold()
    if folded in entry.name.casefold():
        return True
    if folded in entry.key.casefold():
        return True

    wanted = _parse_id_keyword(keyword)
    return wanted is not None and entry.item_id == wanted


def search_items(
    entries: Iterable[ItemEntry],
    cond: ItemSearchCondition,
) -> List[int]:
    """
    アイテム一覧から条件にマッチするもののインデックス一覧を返す（0 始まり）。
    """
    if cond.is_empty():
        return []

    hits: List[int] = []
    for idx, entry in enumerate(entries):
        if match_item(entry, cond):
            hits.append(idx)
    return hits
