# main.py
"""
MHW Shop Editor のエントリポイント。

- src/ を import パスに追加
- mhwshopeditor.app.main() で QApplication を立ち上げる
"""

import sys
from pathlib import Path

# ──────────────────────────────────────────────
# src ディレクトリを import パスに追加
# ──────────────────────────────────────────────
ROOT_DIR = Path(__file__).resolve().parent
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from mhwshopeditor.app import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main())
