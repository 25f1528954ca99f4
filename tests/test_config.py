from __future__ import annotations

from roombook.utils.config import get_settings


def test_server_ledger_and_local_storage_stay_out_of_the_snapshot_dir(monkeypatch) -> None:
    for name in ("DATA_DIR", "SNAPSHOT_DIR", "LOCAL_STORAGE_PATH"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    try:
        settings = get_settings()
    finally:
        get_settings.cache_clear()

    assert settings.data_dir != settings.snapshot_dir
    assert settings.local_storage_path.parent != settings.snapshot_dir
    assert settings.snapshot_dir not in settings.data_dir.parents
