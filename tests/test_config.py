"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from recgen.config import CONFIG_FILENAME, RecgenConfig, load_config
from recgen.errors import ConfigError


def test_load_config_defaults_when_missing(manifest_builder) -> None:
    config = load_config(manifest_builder.root)

    assert isinstance(config, RecgenConfig)
    assert config.root == manifest_builder.root.resolve()
    assert config.naming.record_suffix == "Record"
    assert config.naming.immutable_prefix == "Immutable"
    assert config.naming.merge_suffix == "SuperRecord"
    assert config.accessors.prefixes == ["get"]
    assert config.accessors.boolean_prefixes == ["is"]
    assert config.render.layout == "module"
    assert config.render.builtin_interfaces == ["object"]
    assert config.cycles == "warn"
    assert config.workers == 1
    assert config.output_directory == manifest_builder.root.resolve() / "generated"


def test_load_config_reads_values(manifest_builder) -> None:
    manifest_builder.config(
        """
        naming:
          record_suffix: Data
          immutable_prefix: Frozen
          merge_suffix: Combined
        accessors:
          prefixes: [get, read]
          boolean_prefixes: [is, has]
        render:
          layout: Bundle
          bundle_module: shop.records
          templates_dir: templates
          builtin_interfaces: [object, Generic]
        output:
          directory: src
          overwrite: "yes"
        cycles: ERROR
        workers: "4"
        """
    )

    config = load_config(manifest_builder.root)

    assert (config.naming.record_suffix, config.naming.immutable_prefix, config.naming.merge_suffix) == (
        "Data",
        "Frozen",
        "Combined",
    )
    assert config.accessors.prefixes == ["get", "read"]
    assert config.accessors.boolean_prefixes == ["is", "has"]
    assert config.render.layout == "bundle"
    assert config.render.bundle_module == "shop.records"
    assert config.render.templates_dir == config.root / "templates"
    assert config.render.builtin_interfaces == ["object", "Generic"]
    assert config.output_directory == config.root / "src"
    assert config.output.overwrite is True
    assert config.cycles == "error"
    assert config.workers == 4


def test_load_config_accepts_the_file_path_or_a_sibling(manifest_builder) -> None:
    config_file = manifest_builder.config("workers: 2\n")
    manifest = manifest_builder.manifest("types: []\n")

    assert load_config(config_file).workers == 2
    assert load_config(manifest).workers == 2
    assert config_file.name == CONFIG_FILENAME


def test_load_config_empty_file_gives_defaults(manifest_builder) -> None:
    manifest_builder.config("\n")

    assert load_config(manifest_builder.root).cycles == "warn"


@pytest.mark.parametrize("workers", ["0", "-3", "many", "true"])
def test_load_config_coerces_bad_worker_counts(manifest_builder, workers: str) -> None:
    manifest_builder.config(f"workers: {workers}\n")

    assert load_config(manifest_builder.root).workers == 1


@pytest.mark.parametrize(
    "content",
    [
        "render:\n  layout: tree\n",
        "cycles: sometimes\n",
        "naming:\n  record_suffix: 'not valid'\n",
        "naming:\n  record_suffix: ''\n  immutable_prefix: ''\n",
        "- a\n- b\n",
        "naming: [unclosed\n",
    ],
)
def test_load_config_rejects_invalid_content(manifest_builder, content: str) -> None:
    manifest_builder.config(content)

    with pytest.raises(ConfigError):
        load_config(manifest_builder.root)
