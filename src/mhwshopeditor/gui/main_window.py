# src/mhwshopeditor/gui/main_window.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtCore import QModelIndex, Qt, QTimer
from PySide6.QtGui import QAction, QFont, QKeySequence
from PySide6.QtWidgets import (
    QAbstractItemView,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSplitter,
    QStatusBar,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from mhwshopeditor.item_master import (
    ItemEntry,
    build_name_lookup,
    clear_item_cache,
    describe_item,
    find_item_tables,
    load_item_master,
)
from mhwshopeditor.logic.item_search import ItemSearchCondition, search_items
from mhwshopeditor.logic.slot_list import ShopSlotList
from mhwshopeditor.models.shop_list import MAX_SLOTS, ShopListDocument
from mhwshopeditor.parser.errors import (
    CapacityExceededError,
    MalformedInputError,
    ShopListError,
)
from mhwshopeditor.parser.shop_list_codec import create_default_document
from mhwshopeditor.settings import Settings, default_settings_path
from mhwshopeditor.shop_file import SHOP_LIST_SUFFIX, load_shop_list, save_shop_list
from mhwshopeditor.gui.settings_dialog import SettingsDialog

_logger = logging.getLogger(__name__)

SHOP_FILE_FILTER = "shopList ファイル (*.slt);;すべてのファイル (*.*)"


class MainWindow(QMainWindow):
    """
    MHW Shop Editor のメインウィンドウ。

    左: アイテム表（検索付き）とお気に入り
    右: 編集中のスロット一覧
    """

    TAB_ALL_ITEMS = 0
    TAB_FAVORITES = 1

    def __init__(
        self,
        settings: Settings,
        settings_path: Optional[Path] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("MHW Shop Editor")
        self.resize(1000, 650)

        self._settings = settings
        self._settings_path = settings_path or default_settings_path()

        # 開いているファイルとテンプレートになるドキュメント
        self._current_file: Optional[Path] = None
        self._document: ShopListDocument = create_default_document()
        self._slots = ShopSlotList.from_document(self._document)

        # アイテム表
        self._items: List[ItemEntry] = []
        self._item_names: Dict[int, str] = {}
        self._items_by_key: Dict[str, ItemEntry] = {}
        # 左リストの行 -> self._items の添字
        self._visible_item_indexes: List[int] = []
        # スロット一覧へのドロップを処理中か
        self._drop_in_progress = False

        self._create_central_widgets()
        self._create_actions()
        self._create_menus()
        self._create_status_bar()

        self._apply_font_size()
        self._auto_load_item_tables()
        self._populate_slot_list()
        self._update_title()

    # ─────────────────────────────
    # UI 構築
    # ─────────────────────────────
    def _create_central_widgets(self) -> None:
        splitter = QSplitter(Qt.Horizontal, self)

        # ── 左: アイテム表 ─────────────────────
        left = QWidget(splitter)
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(4, 4, 4, 4)

        self.search_edit = QLineEdit(left)
        self.search_edit.setPlaceholderText("アイテム名 / キー / ID (例: 0x1A, #26)")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.textChanged.connect(self._on_search_text_changed)
        left_layout.addWidget(self.search_edit)

        self.item_tabs = QTabWidget(left)

        self.item_list = QListWidget(self.item_tabs)
        self.item_list.setSelectionMode(QAbstractItemView.ExtendedSelection)
        self.item_list.itemDoubleClicked.connect(lambda _item: self._on_add_items())
        self.item_tabs.addTab(self.item_list, "全アイテム")

        self.favorite_list = QListWidget(self.item_tabs)
        self.favorite_list.setSelectionMode(QAbstractItemView.ExtendedSelection)
        self.favorite_list.itemDoubleClicked.connect(lambda _item: self._on_add_items())
        self.item_tabs.addTab(self.favorite_list, "お気に入り")

        left_layout.addWidget(self.item_tabs)

        add_row = QHBoxLayout()
        self.add_button = QPushButton("追加 →", left)
        self.add_button.clicked.connect(self._on_add_items)
        self.favorite_button = QPushButton("お気に入り登録/解除", left)
        self.favorite_button.clicked.connect(self._on_toggle_favorite)
        add_row.addWidget(self.add_button)
        add_row.addWidget(self.favorite_button)
        left_layout.addLayout(add_row)

        # ── 右: スロット一覧 ─────────────────────
        right = QWidget(splitter)
        right_layout = QVBoxLayout(right)
        right_layout.setContentsMargins(4, 4, 4, 4)

        self.slot_count_label = QLabel("", right)
        font = self.slot_count_label.font()
        font.setBold(True)
        self.slot_count_label.setFont(font)
        right_layout.addWidget(self.slot_count_label)

        self.slot_list = QListWidget(right)
        self.slot_list.setSelectionMode(QAbstractItemView.ExtendedSelection)
        # ドラッグで並べ替え
        self.slot_list.setDragDropMode(QAbstractItemView.InternalMove)
        self.slot_list.setDefaultDropAction(Qt.MoveAction)
        self.slot_list.model().rowsMoved.connect(self._on_slot_rows_moved)
        right_layout.addWidget(self.slot_list)

        button_row = QHBoxLayout()
        self.remove_button = QPushButton("削除", right)
        self.remove_button.clicked.connect(self._on_remove_slots)
        self.up_button = QPushButton("↑ 上へ", right)
        self.up_button.clicked.connect(self._on_move_up)
        self.down_button = QPushButton("↓ 下へ", right)
        self.down_button.clicked.connect(self._on_move_down)
        button_row.addWidget(self.remove_button)
        button_row.addWidget(self.up_button)
        button_row.addWidget(self.down_button)
        button_row.addStretch(1)
        right_layout.addLayout(button_row)

        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

    def _create_actions(self) -> None:
        self.new_action = QAction("新規(&N)", self)
        self.new_action.setShortcut(QKeySequence.New)
        self.new_action.triggered.connect(self._on_new_file)

        self.open_action = QAction("開く(&O)...", self)
        self.open_action.setShortcut(QKeySequence.Open)
        self.open_action.triggered.connect(self._on_open_file)

        self.save_action = QAction("上書き保存(&S)", self)
        self.save_action.setShortcut(QKeySequence.Save)
        self.save_action.triggered.connect(self._on_save)

        self.save_as_action = QAction("名前を付けて保存(&A)...", self)
        self.save_as_action.setShortcut(QKeySequence.SaveAs)
        self.save_as_action.triggered.connect(self._on_save_as)

        self.exit_action = QAction("終了(&Q)", self)
        self.exit_action.setShortcut("Ctrl+Q")
        self.exit_action.triggered.connect(self.close)

        self.undo_action = QAction("元に戻す(&U)", self)
        self.undo_action.setShortcut(QKeySequence.Undo)
        self.undo_action.triggered.connect(self._on_undo)

        self.redo_action = QAction("やり直し(&R)", self)
        self.redo_action.setShortcut(QKeySequence.Redo)
        self.redo_action.triggered.connect(self._on_redo)

        self.remove_action = QAction("スロット削除(&D)", self)
        self.remove_action.setShortcut(QKeySequence.Delete)
        # スロット一覧にフォーカスがあるときだけ有効
        self.remove_action.setShortcutContext(Qt.WidgetShortcut)
        self.slot_list.addAction(self.remove_action)
        self.remove_action.triggered.connect(self._on_remove_slots)

        self.clear_action = QAction("すべてのスロットを削除", self)
        self.clear_action.triggered.connect(self._on_clear_slots)

        self.find_action = QAction("アイテム検索(&F)", self)
        self.find_action.setShortcut(QKeySequence.Find)
        self.find_action.triggered.connect(self._on_focus_search)

        self.load_items_action = QAction("アイテム表読込(&I)...", self)
        self.load_items_action.triggered.connect(self._on_load_item_tables)

        self.settings_action = QAction("設定(&P)...", self)
        self.settings_action.triggered.connect(self._on_settings)

    def _create_menus(self) -> None:
        menubar = self.menuBar()

        file_menu = menubar.addMenu("ファイル(&F)")
        file_menu.addAction(self.new_action)
        file_menu.addAction(self.open_action)
        self.recent_menu = file_menu.addMenu("最近使ったファイル")
        file_menu.addSeparator()
        file_menu.addAction(self.save_action)
        file_menu.addAction(self.save_as_action)
        file_menu.addSeparator()
        file_menu.addAction(self.exit_action)
        self._rebuild_recent_menu()

        edit_menu = menubar.addMenu("編集(&E)")
        edit_menu.addAction(self.undo_action)
        edit_menu.addAction(self.redo_action)
        edit_menu.addSeparator()
        edit_menu.addAction(self.remove_action)
        edit_menu.addAction(self.clear_action)
        edit_menu.addSeparator()
        edit_menu.addAction(self.find_action)

        tool_menu = menubar.addMenu("ツール(&T)")
        tool_menu.addAction(self.load_items_action)
        tool_menu.addSeparator()
        tool_menu.addAction(self.settings_action)

    def _create_status_bar(self) -> None:
        status = QStatusBar(self)
        self.setStatusBar(status)
        self.statusBar().showMessage("shopList ファイルを開いてください (Ctrl+O)")

    def _rebuild_recent_menu(self) -> None:
        self.recent_menu.clear()
        if not self._settings.recent_files:
            empty = self.recent_menu.addAction("(なし)")
            empty.setEnabled(False)
            return

        for path_str in self._settings.recent_files:
            act = self.recent_menu.addAction(path_str)
            act.triggered.connect(lambda _checked=False, p=path_str: self._open_recent_file(Path(p)))

    def _apply_font_size(self) -> None:
        font = QFont(self.font())
        font.setPointSizeF(self._settings.app_font_size)
        self.setFont(font)

    def _update_title(self) -> None:
        name = self._current_file.name if self._current_file else "(新規)"
        mark = " *" if self._slots.dirty else ""
        self.setWindowTitle(f"MHW Shop Editor - {name}{mark}")

    # ─────────────────────────────
    # アイテム表
    # ─────────────────────────────
    def _item_tables_dir(self) -> Path:
        return self._settings_path.parent / "items"

    def _auto_load_item_tables(self) -> None:
        """
        設定の言語に対応するアイテム表があれば自動で読み込む。
        見つからない・読めない場合は ID 表示のまま起動する。
        """
        paths = find_item_tables(self._item_tables_dir(), self._settings.language)
        if not paths:
            self._set_items([])
            return

        try:
            self._set_items(load_item_master(paths))
        except (OSError, ValueError) as e:
            _logger.warning("could not load item tables %s: %s", paths, e)
            self._set_items([])
            return

        self.statusBar().showMessage(
            f"アイテム表を自動読み込みしました ({len(self._items):,} 件)"
        )

    def _set_items(self, entries: List[ItemEntry]) -> None:
        self._items = list(entries)
        self._item_names = build_name_lookup(self._items)
        self._items_by_key = {e.key: e for e in self._items}
        self._populate_item_list()
        self._populate_favorite_list()
        self._populate_slot_list()

    def _populate_item_list(self) -> None:
        self.item_list.clear()

        cond = ItemSearchCondition(self.search_edit.text())
        if cond.is_empty():
            indexes = list(range(len(self._items)))
        else:
            indexes = search_items(self._items, cond)
        self._visible_item_indexes = indexes

        for idx in indexes:
            entry = self._items[idx]
            self.item_list.addItem(f"{entry.name}  [0x{entry.item_id:04X}]")

    def _populate_favorite_list(self) -> None:
        self.favorite_list.clear()
        for key in self._settings.saved_items:
            entry = self._items_by_key.get(key)
            label = f"{entry.name}  [0x{entry.item_id:04X}]" if entry else key
            list_item = QListWidgetItem(label)
            list_item.setData(Qt.UserRole, key)
            self.favorite_list.addItem(list_item)

    def _selected_entries(self) -> List[ItemEntry]:
        """左側で選択されているアイテム（表示順）"""
        entries: List[ItemEntry] = []
        if self.item_tabs.currentIndex() == self.TAB_FAVORITES:
            for list_item in self.favorite_list.selectedItems():
                entry = self._items_by_key.get(list_item.data(Qt.UserRole))
                if entry is not None:
                    entries.append(entry)
            return entries

        rows = sorted(self.item_list.row(i) for i in self.item_list.selectedItems())
        for row in rows:
            entries.append(self._items[self._visible_item_indexes[row]])
        return entries

    def _on_search_text_changed(self, _text: str) -> None:
        self._populate_item_list()
        self.statusBar().showMessage(f"検索結果: {self.item_list.count():,} 件")

    def _on_focus_search(self) -> None:
        self.item_tabs.setCurrentIndex(self.TAB_ALL_ITEMS)
        self.search_edit.setFocus()
        self.search_edit.selectAll()

    def _on_load_item_tables(self) -> None:
        paths, _ = QFileDialog.getOpenFileNames(
            self,
            "アイテム表を選択",
            "",
            "アイテム表 (*.json *.csv *.tsv *.txt);;すべてのファイル (*.*)",
        )
        if not paths:
            return

        try:
            clear_item_cache()
            entries = load_item_master([Path(p) for p in paths])
        except (OSError, ValueError) as e:
            QMessageBox.warning(
                self,
                "アイテム表読み込みエラー",
                f"アイテム表の読み込みに失敗しました。\n\nエラー: {e}",
            )
            return

        self._set_items(entries)
        self.statusBar().showMessage(f"アイテム表読込完了: {len(entries):,} 件")

    def _on_toggle_favorite(self) -> None:
        entries = self._selected_entries()
        if not entries:
            return
        for entry in entries:
            self._settings.toggle_saved_item(entry.key)
        self._settings.save(self._settings_path)
        self._populate_favorite_list()

    # ─────────────────────────────
    # スロット一覧
    # ─────────────────────────────
    def _populate_slot_list(self, select: Optional[int] = None) -> None:
        self.slot_list.clear()
        for i, item_id in enumerate(self._slots.item_ids()):
            label = describe_item(item_id, self._item_names)
            self.slot_list.addItem(f"{i:03d}: {label}")

        if select is not None and 0 <= select < self.slot_list.count():
            self.slot_list.setCurrentRow(select)

        self.slot_count_label.setText(f"スロット数: {len(self._slots)} / {MAX_SLOTS}")
        self.undo_action.setEnabled(self._slots.can_undo)
        self.redo_action.setEnabled(self._slots.can_redo)
        self._update_title()

    def _selected_slot_rows(self) -> List[int]:
        return sorted(self.slot_list.row(i) for i in self.slot_list.selectedItems())

    def _on_add_items(self) -> None:
        entries = self._selected_entries()
        if not entries:
            return

        top = self._settings.insert_top
        try:
            pos = self._slots.insert_many([e.item_id for e in entries], top=top)
        except CapacityExceededError as e:
            QMessageBox.warning(
                self,
                "スロット数の上限",
                f"ショップに登録できるアイテムは {e.limit} 件までです。",
            )
            return

        self._populate_slot_list(select=pos)
        self.statusBar().showMessage(f"{len(entries)} 件追加しました")

    def _on_remove_slots(self) -> None:
        rows = self._selected_slot_rows()
        if not rows:
            return
        self._slots.remove(rows)
        self._populate_slot_list(select=min(rows[0], len(self._slots) - 1))

    def _on_clear_slots(self) -> None:
        if not len(self._slots):
            return
        answer = QMessageBox.question(self, "確認", "すべてのスロットを削除しますか？")
        if answer != QMessageBox.Yes:
            return
        self._slots.clear()
        self._populate_slot_list()

    def _on_move_up(self) -> None:
        row = self.slot_list.currentRow()
        if row < 0:
            return
        new_row = self._slots.move_up(row)
        if new_row is not None:
            self._populate_slot_list(select=new_row)

    def _on_move_down(self) -> None:
        row = self.slot_list.currentRow()
        if row < 0:
            return
        new_row = self._slots.move_down(row)
        if new_row is not None:
            self._populate_slot_list(select=new_row)

    def _on_slot_rows_moved(
        self,
        _src_parent: QModelIndex,
        start: int,
        _end: int,
        _dst_parent: QModelIndex,
        row: int,
    ) -> None:
        """
        ドラッグ&ドロップで並べ替えられたときに呼ばれる。

        Qt の row は「移動前の並びでの挿入位置」なので、下方向への移動は1つ詰める。
        複数選択のドロップでは1行ずつ呼ばれるので、同じドロップ内の2行目以降は履歴を積まない。
        """
        dst = row - 1 if row > start else row
        self._slots.move(start, dst, record=not self._drop_in_progress)

        if not self._drop_in_progress:
            self._drop_in_progress = True
            # ドロップ処理中はリストを作り直せない
            QTimer.singleShot(0, lambda: self._finish_drop(dst))

    def _finish_drop(self, select: int) -> None:
        self._drop_in_progress = False
        self._populate_slot_list(select=select)

    def _on_undo(self) -> None:
        if self._slots.undo():
            self._populate_slot_list()

    def _on_redo(self) -> None:
        if self._slots.redo():
            self._populate_slot_list()

    # ─────────────────────────────
    # ファイル読み書き
    # ─────────────────────────────
    def _confirm_discard(self) -> bool:
        if not self._slots.dirty:
            return True
        answer = QMessageBox.question(
            self,
            "未保存の変更",
            "保存されていない変更があります。破棄してよろしいですか？",
        )
        return answer == QMessageBox.Yes

    def _on_new_file(self) -> None:
        if not self._confirm_discard():
            return
        self._current_file = None
        self._document = create_default_document()
        self._slots = ShopSlotList.from_document(self._document)
        self._populate_slot_list()
        self.statusBar().showMessage("新しいショップリストを作成しました")

    def _on_open_file(self) -> None:
        if not self._confirm_discard():
            return
        path_str, _ = QFileDialog.getOpenFileName(
            self,
            "shopList ファイルを開く",
            self._settings.save_directory,
            SHOP_FILE_FILTER,
        )
        if not path_str:
            return
        self._load_shop_file(Path(path_str))

    def _open_recent_file(self, path: Path) -> None:
        if not self._confirm_discard():
            return
        self._load_shop_file(path)

    def _load_shop_file(self, path: Path) -> None:
        try:
            document = load_shop_list(path)
        except OSError as e:
            self.statusBar().showMessage(f"ファイル読み込みエラー: {e}")
            QMessageBox.warning(self, "読み込みエラー", f"ファイルを読み込めませんでした。\n\n{e}")
            return
        except MalformedInputError as e:
            QMessageBox.warning(
                self,
                "読み込みエラー",
                f"{path.name} は有効なショップリストではありません。\n\n{e}",
            )
            return

        self._current_file = path
        self._document = document
        self._slots = ShopSlotList.from_document(document)
        self._remember_file(path)
        self._populate_slot_list()

        self.statusBar().showMessage(f"{path.name} を読み込みました ({document.slot_count} スロット)")

    def _on_save(self) -> None:
        if self._current_file is None:
            self._on_save_as()
            return
        self._save_to(self._current_file)

    def _on_save_as(self) -> None:
        start = str(self._current_file) if self._current_file else self._settings.save_directory
        path_str, _ = QFileDialog.getSaveFileName(
            self,
            "名前を付けて保存",
            start,
            SHOP_FILE_FILTER,
        )
        if not path_str:
            return

        path = Path(path_str)
        if not path.suffix:
            path = path.with_suffix(SHOP_LIST_SUFFIX)
        self._save_to(path)

    def _save_to(self, path: Path) -> None:
        try:
            save_shop_list(path, self._document, self._slots.item_ids())
        except CapacityExceededError as e:
            QMessageBox.warning(
                self,
                "保存エラー",
                f"スロット数が上限 ({e.limit}) を超えているため保存できません。",
            )
            return
        except (OSError, ShopListError) as e:
            QMessageBox.warning(self, "保存エラー", f"保存に失敗しました。\n\n{e}")
            return

        self._current_file = path
        self._slots.mark_saved()
        self._remember_file(path)
        self._update_title()
        self.statusBar().showMessage(f"{path.name} に保存しました ({len(self._slots)} スロット)")

    def _remember_file(self, path: Path) -> None:
        self._settings.save_directory = str(path.parent)
        self._settings.add_recent_file(path)
        self._settings.save(self._settings_path)
        self._rebuild_recent_menu()

    # ─────────────────────────────
    # 設定
    # ─────────────────────────────
    def _on_settings(self) -> None:
        old_language = self._settings.language
        if not SettingsDialog.edit(self._settings, self):
            return

        self._settings.save(self._settings_path)
        self._apply_font_size()
        if self._settings.language != old_language:
            clear_item_cache()
            self._auto_load_item_tables()
        self.statusBar().showMessage("設定を保存しました")

    def closeEvent(self, event) -> None:  # noqa: N802 (Qt の命名)
        if not self._confirm_discard():
            event.ignore()
            return
        self._settings.save(self._settings_path)
        event.accept()
