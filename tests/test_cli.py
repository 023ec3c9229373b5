import json

from satcat_ingest import cli
from satcat_ingest.store import SatelliteStore
from satcat_ingest.store_inspect import inspect_store

from conftest import FakeSession, iss_routes


def test_crawl_command(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(cli.requests, "Session", lambda: FakeSession(iss_routes()))
    out = tmp_path / "descriptions"

    rc = cli.main(
        ["crawl", "-s", "25544", "-e", "25544", "--out", str(out), "--interval", "0", "--no-progress"]
    )

    assert rc == 0
    printed = capsys.readouterr().out
    assert "satellites=1" in printed
    assert "categories=2" in printed
    assert "images=2" in printed
    assert (out / "satellites" / "25544").exists()


def test_crawl_rejects_bad_range(tmp_path, capsys):
    rc = cli.main(["crawl", "-s", "10", "-e", "5", "--out", str(tmp_path)])
    assert rc == 2
    assert "end (5) must be >= start (10)" in capsys.readouterr().err


def test_inspect_command(tmp_path, capsys):
    store = SatelliteStore(tmp_path)
    store.write_category(4, "x")
    store.write_satellite_description(1, "one")
    store.write_satellite_categories(1, [4])
    store.write_satellite_categories(2, [4])
    store.write_image(1, "a.png", b"")
    store.write_image(1, "b.png", b"")

    rc = cli.main(["inspect", "--in", str(tmp_path), "--json"])

    assert rc == 0
    data = json.loads(capsys.readouterr().out)
    assert data["categories"] == 1
    assert data["satellite_descriptions"] == 1
    assert data["category_lists"] == 2
    assert data["images"] == 2
    assert data["image_owners"] == 1
    assert data["missing_description_sample"] == [2]
    assert data["last_run"] is None


def test_inspect_missing_directory(tmp_path, capsys):
    rc = cli.main(["inspect", "--in", str(tmp_path / "nope")])
    assert rc == 2


def test_inspect_store_ignores_temporary_files(tmp_path):
    store = SatelliteStore(tmp_path)
    (store.categories_dir / ".4.tmp.abc").write_text("partial", encoding="utf-8")
    assert inspect_store(out_dir=tmp_path).categories == 0
