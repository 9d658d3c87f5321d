"""CLI behaviour tests."""

from __future__ import annotations

import json

import pytest

from recgen.cli import _build_parser, main
from tests._fixtures.builders import SHOP_MANIFEST


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "generate", "types.yml"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["generate", "types.yml", "-v"])
    assert args.verbose is True
    assert args.manifest == "types.yml"


def test_cli_generate_flags() -> None:
    args = _build_parser().parse_args(["generate", "types.yml", "--dry-run", "--bundle", "--out", "build"])
    assert args.dry_run is True
    assert args.bundle is True
    assert str(args.out) == "build"


def test_cli_serve_defaults() -> None:
    args = _build_parser().parse_args(["serve"])
    assert (args.host, args.port) == ("127.0.0.1", 8000)
    assert args.verbose is False


def test_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_generate_dry_run_prints_sources(manifest_builder, capsys) -> None:
    manifest = manifest_builder.manifest(SHOP_MANIFEST)

    main(["generate", str(manifest), "--dry-run"])

    out = capsys.readouterr().out
    assert "# --- shop/person_record.py" in out
    assert "class PersonRecord:" in out
    assert "emitted  shop.PersonRecord" in out
    assert "emitted  shop.AddressRecord" in out
    assert not (manifest_builder.root / "generated").exists()


def test_generate_writes_into_out_directory(manifest_builder, tmp_path, capsys) -> None:
    manifest = manifest_builder.manifest(SHOP_MANIFEST)
    out = tmp_path / "build"

    main(["generate", str(manifest), "--out", str(out), "--bundle"])

    assert (out / "records.py").exists()
    assert "emitted  shop.PersonRecord" in capsys.readouterr().out


def test_generate_exits_nonzero_on_failures(manifest_builder, tmp_path, capsys) -> None:
    manifest = manifest_builder.manifest(SHOP_MANIFEST)
    out = tmp_path / "build"
    main(["generate", str(manifest), "--out", str(out)])
    capsys.readouterr()

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(manifest), "--out", str(out)])

    assert excinfo.value.code == 1
    assert "failed   shop.PersonRecord (write_failure)" in capsys.readouterr().out


def test_generate_reports_invalid_usage(manifest_builder, capsys) -> None:
    manifest = manifest_builder.manifest(
        """
        types:
          - name: shop.Person
        requests:
          - source: shop.Person
            variant: immutable
        """
    )

    main(["generate", str(manifest), "--dry-run"])

    out = capsys.readouterr().out
    assert "invalid  Skipped 1 element(s) requested as 'immutable'" in out
    assert "emitted" not in out


def test_generate_missing_manifest_exits_with_error(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(tmp_path / "missing.yml")])

    assert excinfo.value.code == 1
    assert "recgen generate failed" in capsys.readouterr().err


def test_inspect_prints_models_as_json(manifest_builder, capsys) -> None:
    manifest = manifest_builder.manifest(SHOP_MANIFEST)

    main(["inspect", str(manifest)])

    payload = json.loads(capsys.readouterr().out)
    assert [model["target_name"] for model in payload["models"]] == ["shop.PersonRecord", "shop.AddressRecord"]
    person = payload["models"][0]
    assert person["variant"] == "standard"
    assert [field["name"] for field in person["fields"]] == ["name", "active", "address", "previous"]
    assert payload["failed"] == []
    assert payload["invalid_usage"] == []
