# src/mhwshopeditor/logic/slot_list.py

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from mhwshopeditor.models.shop_list import MAX_SLOTS, ShopListDocument
from mhwshopeditor.parser.errors import CapacityExceededError


class ShopSlotList:
    """
    編集中のスロット並び（アイテムIDの列）。

    GUI からの追加・削除・並べ替えはすべてここを通す。
    元の ShopListDocument には触らず、保存時に item_ids() を encode に渡す。
    """

    def __init__(self, item_ids: Iterable[int] = (), *, capacity: int = MAX_SLOTS) -> None:
        self.capacity = capacity
        self._ids: List[int] = list(item_ids)
        self._undo: List[Tuple[int, ...]] = []
        self._redo: List[Tuple[int, ...]] = []
        self._saved: Tuple[int, ...] = tuple(self._ids)

    @classmethod
    def from_document(cls, document: ShopListDocument) -> ShopSlotList:
        return cls(document.item_ids)

    # ─────────────────────────────
    # 参照
    # ─────────────────────────────
    def __len__(self) -> int:
        return len(self._ids)

    def __getitem__(self, index: int) -> int:
        return self._ids[index]

    def item_ids(self) -> Tuple[int, ...]:
        return tuple(self._ids)

    @property
    def is_full(self) -> bool:
        return len(self._ids) >= self.capacity

    @property
    def dirty(self) -> bool:
        return tuple(self._ids) != self._saved

    def mark_saved(self) -> None:
        self._saved = tuple(self._ids)

    # ─────────────────────────────
    # 編集
    # ─────────────────────────────
    def _snapshot(self) -> None:
        self._undo.append(tuple(self._ids))
        self._redo.clear()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._ids):
            raise IndexError(f"slot index out of range: {index}")

    def insert(self, item_id: int, *, top: bool = False) -> int:
        """
        アイテムを先頭 or 末尾に追加し、追加した位置を返す。
        """
        return self.insert_many([item_id], top=top)

    def insert_many(self, item_ids: Iterable[int], *, top: bool = False) -> int:
        """
        まとめて追加する。上限を超える場合は1件も追加しない。

        戻り値は追加した先頭の位置。
        """
        new_ids = [int(i) for i in item_ids]
        if len(self._ids) + len(new_ids) > self.capacity:
            raise CapacityExceededError(len(self._ids) + len(new_ids), self.capacity)

        self._snapshot()
        if top:
            self._ids[0:0] = new_ids
            return 0
        pos = len(self._ids)
        self._ids.extend(new_ids)
        return pos

    def remove(self, indexes: Iterable[int]) -> None:
        targets = sorted(set(indexes), reverse=True)
        for idx in targets:
            self._check_index(idx)
        if not targets:
            return

        self._snapshot()
        for idx in targets:
            del self._ids[idx]

    def replace(self, index: int, item_id: int) -> None:
        self._check_index(index)
        self._snapshot()
        self._ids[index] = int(item_id)

    def move(self, src: int, dst: int, *, record: bool = True) -> None:
        """
        src の要素を取り出して dst の位置に入れ直す（ドラッグ&ドロップ並べ替え）。

        record=False のときは履歴を積まない。1回のドロップで複数行が動く場合、
        2行目以降をこれで呼ぶと、元に戻す1回でドロップ全体が戻る。
        """
        self._check_index(src)
        self._check_index(dst)
        if src == dst:
            return

        if record:
            self._snapshot()
        item = self._ids.pop(src)
        self._ids.insert(dst, item)

    def move_up(self, index: int) -> Optional[int]:
        """1つ上へ。先頭なら何もしない。移動後の位置を返す"""
        if index <= 0:
            return None
        self.move(index, index - 1)
        return index - 1

    def move_down(self, index: int) -> Optional[int]:
        """1つ下へ。末尾なら何もしない。移動後の位置を返す"""
        if index >= len(self._ids) - 1:
            return None
        self.move(index, index + 1)
        return index + 1

    def clear(self) -> None:
        if not self._ids:
            return
        self._snapshot()
        self._ids.clear()

    # ─────────────────────────────
    # 元に戻す / やり直し
    # ─────────────────────────────
    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(tuple(self._ids))
        self._ids = list(self._undo.pop())
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(tuple(self._ids))
        self._ids = list(self._redo.pop())
        return True

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)
