# src/mhwshopeditor/settings.py

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List

_logger = logging.getLogger(__name__)

MAX_RECENT_FILES = 10


def default_settings_path() -> Path:
    """
    設定ファイルの保存先:
        ~/.mhwshopeditor/settings.json
    """
    return Path.home() / ".mhwshopeditor" / "settings.json"


@dataclass
class Settings:
    """
    エディタの設定。

    起動時に Settings.load() で読み込み、MainWindow に渡す。
    コーデック側はこのクラスを一切参照しない。
    """
    save_directory: str = ""
    language: str = "eng"
    insert_top: bool = False      # False: 末尾に追加 / True: 先頭に追加
    app_font_size: float = 19.6
    saved_items: List[str] = field(default_factory=list)   # お気に入りアイテムのキー
    recent_files: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> Settings:
        """
        JSON 由来の dict から Settings を作る。

        知らないキーは無視し、型が合わない値は既定値のままにする。
        """
        defaults = cls()
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in raw:
                continue
            value = raw[f.name]
            default = getattr(defaults, f.name)

            if isinstance(default, bool):
                ok = isinstance(value, bool)
            elif isinstance(default, float):
                ok = isinstance(value, (int, float)) and not isinstance(value, bool)
                if ok:
                    value = float(value)
            elif isinstance(default, list):
                ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
            else:
                ok = isinstance(value, str)

            if ok:
                values[f.name] = value
            else:
                _logger.warning("ignoring setting %s with unexpected value %r", f.name, value)
        return cls(**values)

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """設定ファイルを読み込む。無い・壊れている場合は既定値を返す"""
        path = path or default_settings_path()
        if not path.exists():
            return cls()

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            _logger.warning("could not read settings from %s: %s", path, e)
            return cls()

        if not isinstance(raw, dict):
            _logger.warning("settings file %s is not a JSON object", path)
            return cls()
        return cls.from_dict(raw)

    def save(self, path: Path | None = None) -> None:
        """設定を書き出す。失敗してもアプリ動作は継続する"""
        path = path or default_settings_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(asdict(self), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as e:
            _logger.warning("could not write settings to %s: %s", path, e)

    def add_recent_file(self, path: Path | str) -> None:
        s = str(path)
        if s in self.recent_files:
            self.recent_files.remove(s)
        self.recent_files.insert(0, s)
        del self.recent_files[MAX_RECENT_FILES:]

    def toggle_saved_item(self, key: str) -> bool:
        """お気に入りの追加/解除。追加したら True"""
        if key in self.saved_items:
            self.saved_items.remove(key)
            return False
        self.saved_items.append(key)
        return True
