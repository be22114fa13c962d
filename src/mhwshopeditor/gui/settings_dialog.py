# src/mhwshopeditor/gui/settings_dialog.py

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QDoubleSpinBox,
    QFormLayout,
    QWidget,
)

from mhwshopeditor.settings import Settings

# アイテム表の言語コード -> 表示名
LANGUAGES = {
    "eng": "English",
    "jpn": "日本語",
    "fre": "Français",
    "ger": "Deutsch",
    "ita": "Italiano",
    "spa": "Español",
    "kor": "한국어",
    "chT": "繁體中文",
    "chS": "简体中文",
}


class SettingsDialog(QDialog):
    """
    設定ダイアログ。

    - アイテム表の言語
    - フォントサイズ
    - 追加位置（先頭 / 末尾）

    OK が押されたら apply_to() で Settings に書き戻す。
    """

    def __init__(self, settings: Settings, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("設定")

        self.language_combo = QComboBox(self)
        for code, label in LANGUAGES.items():
            self.language_combo.addItem(f"{label} ({code})", code)
        idx = self.language_combo.findData(settings.language)
        if idx >= 0:
            self.language_combo.setCurrentIndex(idx)

        self.font_size_spin = QDoubleSpinBox(self)
        self.font_size_spin.setRange(8.0, 48.0)
        self.font_size_spin.setSingleStep(0.5)
        self.font_size_spin.setValue(settings.app_font_size)

        self.insert_top_check = QCheckBox("新しいアイテムを先頭に追加する", self)
        self.insert_top_check.setChecked(settings.insert_top)

        self.button_box = QDialogButtonBox(
            QDialogButtonBox.Ok | QDialogButtonBox.Cancel,
            orientation=Qt.Horizontal,
            parent=self,
        )
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)

        layout = QFormLayout(self)
        layout.setFieldGrowthPolicy(QFormLayout.AllNonFixedFieldsGrow)
        layout.addRow("言語:", self.language_combo)
        layout.addRow("フォントサイズ:", self.font_size_spin)
        layout.addRow("", self.insert_top_check)
        layout.addRow(self.button_box)
        self.setLayout(layout)

    def apply_to(self, settings: Settings) -> None:
        settings.language = str(self.language_combo.currentData())
        settings.app_font_size = float(self.font_size_spin.value())
        settings.insert_top = self.insert_top_check.isChecked()

    @staticmethod
    def edit(settings: Settings, parent: Optional[QWidget] = None) -> bool:
        """
        単発で呼び出すユーティリティ。変更が確定したら True。
        """
        dlg = SettingsDialog(settings, parent)
        if dlg.exec() != QDialog.Accepted:
            return False
        dlg.apply_to(settings)
        return True
