import pytest

from catalogs.records import CatalogType
from stars import read_cache_header
from tools.build_star_cache import main
from conftest import make_line


def test_builds_cache(write_catalog, cache_path, capsys):
    hip = write_catalog("hip.dat", [make_line(CatalogType.HIPPARCOS, vmag=str(m)) for m in (1, 4)])

    assert main(["--hipparcos", hip, "--cache", str(cache_path)]) == 0

    assert read_cache_header(cache_path).count == 2
    assert "stars=2" in capsys.readouterr().out


def test_info(write_catalog, cache_path, capsys):
    hip = write_catalog("hip.dat", [make_line(CatalogType.HIPPARCOS)])
    main(["--hipparcos", hip, "--cache", str(cache_path)])
    capsys.readouterr()

    assert main(["--cache", str(cache_path), "--info"]) == 0
    out = capsys.readouterr().out
    assert "catalogs=HIPPARCOS" in out
    assert "stars=1" in out


def test_info_without_cache(cache_path, capsys):
    assert main(["--cache", str(cache_path), "--info"]) == 1
    assert "missing" in capsys.readouterr().out


def test_nothing_loaded(tmp_path, cache_path):
    assert main(["--tycho", str(tmp_path / "missing.dat"), "--cache", str(cache_path)]) == 1


def test_requires_a_catalog(cache_path):
    with pytest.raises(SystemExit):
        main(["--cache", str(cache_path)])
