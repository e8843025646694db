from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from dlrecords import Download, RecordStore, UserID, open_store
from dlrecords.config import load_config


def test_end_to_end_download_history(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config()

    t0 = datetime(2024, 3, 1, tzinfo=timezone.utc)
    t1 = datetime(2024, 3, 31, tzinfo=timezone.utc)
    t2 = datetime(2024, 3, 2, 8, 15, tzinfo=timezone.utc)

    with open_store(cfg) as store:
        store.save_user_id(UserID(id="u1", create_time=t0, expire_time=t1))
        store.save_download(
            Download(
                user="u1",
                downloaded=t2,
                operating_system="linux",
                architecture="amd64",
                version="1.28.0",
                binary="kubectl",
                url="https://example/kubectl",
            )
        )
        recent = store.get_recent_downloads(UserID(id="u1", create_time=t0, expire_time=t1), 10)

    assert len(recent) == 1
    dl = recent[0]
    assert (dl.operating_system, dl.architecture, dl.version, dl.binary) == ("linux", "amd64", "1.28.0", "kubectl")


def test_history_survives_reopen(tmp_path: Path):
    db_path = tmp_path / "downloads.db"
    user = UserID.new(timedelta(days=30))

    with RecordStore(db_path) as store:
        store.save_user_id(user)
        store.save_download(Download(user=user.id, downloaded=user.create_time, binary="kubeadm"))

    with RecordStore(db_path) as store:
        recent = store.get_recent_downloads(user, 5)

    assert [dl.binary for dl in recent] == ["kubeadm"]


def test_recent_limit_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DLR_RECENT_LIMIT", "2")
    user = UserID.new(timedelta(days=1))

    with open_store(load_config()) as store:
        assert store.default_limit == 2
        for version in ("1.26.0", "1.27.0", "1.28.0"):
            store.save_download(Download(user=user.id, downloaded=user.create_time, version=version))
        recent = store.get_recent_downloads(user)

    # равные метки времени: сначала последняя вставленная
    assert [dl.version for dl in recent] == ["1.28.0", "1.27.0"]
