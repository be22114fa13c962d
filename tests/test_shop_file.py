from __future__ import annotations

import pytest

from mhwshopeditor.parser.errors import CapacityExceededError, MalformedInputError
from mhwshopeditor.parser.shop_list_codec import create_default_document
from mhwshopeditor.shop_file import backup_path_for, load_shop_list, save_shop_list


def test_load_and_save_round_trip(tmp_path, opaque_buffer: bytes) -> None:
    path = tmp_path / "shopList.slt"
    path.write_bytes(opaque_buffer)

    doc = load_shop_list(path)
    save_shop_list(path, doc, doc.item_ids)

    assert path.read_bytes() == opaque_buffer


def test_save_creates_backup_once(tmp_path, opaque_buffer: bytes) -> None:
    path = tmp_path / "shopList.slt"
    path.write_bytes(opaque_buffer)
    doc = load_shop_list(path)

    save_shop_list(path, doc, [1])
    save_shop_list(path, doc, [2])

    bak = backup_path_for(path)
    assert bak.name == "shopList.slt.bak"
    assert bak.read_bytes() == opaque_buffer
    assert len(path.read_bytes()) == 24


def test_save_without_backup(tmp_path, opaque_buffer: bytes) -> None:
    path = tmp_path / "shopList.slt"
    path.write_bytes(opaque_buffer)

    save_shop_list(path, load_shop_list(path), [], backup=False)

    assert not backup_path_for(path).exists()
    assert path.read_bytes() == opaque_buffer[:10]


def test_save_new_file(tmp_path) -> None:
    path = tmp_path / "new.slt"

    written = save_shop_list(path, create_default_document(), [0x10, 0x20])

    assert written == path
    assert len(path.read_bytes()) == 10 + 28
    assert not backup_path_for(path).exists()
    assert not (tmp_path / "new.slt.tmp").exists()


def test_capacity_error_leaves_file_untouched(tmp_path, opaque_buffer: bytes) -> None:
    path = tmp_path / "shopList.slt"
    path.write_bytes(opaque_buffer)

    with pytest.raises(CapacityExceededError):
        save_shop_list(path, load_shop_list(path), [1] * 257)

    assert path.read_bytes() == opaque_buffer
    assert not backup_path_for(path).exists()


def test_load_malformed_file(tmp_path) -> None:
    path = tmp_path / "broken.slt"
    path.write_bytes(b"\x00" * 12)

    with pytest.raises(MalformedInputError):
        load_shop_list(path)


def test_load_missing_file(tmp_path) -> None:
    with pytest.raises(OSError):
        load_shop_list(tmp_path / "missing.slt")
