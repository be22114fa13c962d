# src/mhwshopeditor/parser/errors.py

from __future__ import annotations


class ShopListError(Exception):
    """shopList の読み書きで発生するエラーの基底クラス"""


class InvalidArgumentError(ShopListError, TypeError):
    """必須の引数（バッファ・ドキュメント・ID 列）が None だった"""


class MalformedInputError(ShopListError, ValueError):
    """
    サイズがおかしく shopList として読めない。

    - ヘッダ分の長さが無い
    - ヘッダ以降が 14 バイト単位になっていない
    """


class CapacityExceededError(ShopListError, ValueError):
    """スロット数が上限を超えている"""

    def __init__(self, requested: int, limit: int) -> None:
        super().__init__(f"shop cannot exceed {limit} items (requested {requested})")
        self.requested = requested
        self.limit = limit
