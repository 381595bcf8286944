"""Tests for values/loader.py YAML loading and value tree building."""

from pathlib import Path

import pytest

from helmlet.exceptions import (
    TypeConflictError,
    ValuesError,
    ValuesFileNotFoundError,
    ValuesParseError,
)
from helmlet.values import ConflictPolicy, build_values, load_values, load_values_file


class TestLoadValuesFile:
    """Tests for load_values_file."""

    def test_loads_mapping(self, write_yaml) -> None:
        """A YAML mapping is returned as a dict."""
        path = write_yaml(
            "values.yaml",
            """
image:
  repository: nginx
  tag: "1.25"
replicas: 2
hosts: [a, b]
""",
        )
        assert load_values_file(path) == {
            "image": {"repository": "nginx", "tag": "1.25"},
            "replicas": 2,
            "hosts": ["a", "b"],
        }

    def test_empty_document(self, write_yaml) -> None:
        """An empty file is an empty mapping."""
        path = write_yaml("empty.yaml", "")
        assert load_values_file(path) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ValuesFileNotFoundError."""
        missing = tmp_path / "missing.yaml"
        with pytest.raises(ValuesFileNotFoundError) as exc_info:
            load_values_file(missing)
        assert str(missing) in str(exc_info.value)

    def test_invalid_yaml(self, write_yaml) -> None:
        """Broken YAML raises ValuesParseError."""
        path = write_yaml("bad.yaml", "a: [1, 2\nb: 3\n")
        with pytest.raises(ValuesParseError) as exc_info:
            load_values_file(path)
        assert "parsing YAML from" in str(exc_info.value)

    def test_non_mapping_top_level(self, write_yaml) -> None:
        """A list at the top level is rejected."""
        path = write_yaml("list.yaml", "- a\n- b\n")
        with pytest.raises(ValuesParseError) as exc_info:
            load_values_file(path)
        assert "must be a mapping" in str(exc_info.value)

    def test_errors_share_base_class(self, tmp_path: Path) -> None:
        """Callers can catch ValuesError for any loading failure."""
        with pytest.raises(ValuesError):
            load_values_file(tmp_path / "missing.yaml")


class TestLoadValues:
    """Tests for load_values."""

    def test_no_files(self) -> None:
        """No files gives an empty root."""
        values, files = load_values([])
        assert values == {}
        assert files == []

    def test_later_files_win(self, write_yaml) -> None:
        """Files are merged in order, recursively."""
        base = write_yaml("base.yaml", "image:\n  repository: nginx\n  tag: '1.0'\nreplicas: 1\n")
        prod = write_yaml("prod.yaml", "image:\n  tag: '2.0'\nreplicas: 3\n")

        values, files = load_values([base, prod])

        assert values == {"image": {"repository": "nginx", "tag": "2.0"}, "replicas": 3}
        assert files == [base, prod]

    def test_first_failure_halts(self, write_yaml, tmp_path: Path) -> None:
        """A missing file stops loading."""
        base = write_yaml("base.yaml", "a: 1\n")
        with pytest.raises(ValuesFileNotFoundError):
            load_values([base, tmp_path / "missing.yaml"])

    def test_strict_policy(self, write_yaml) -> None:
        """The strict policy surfaces type conflicts between files."""
        base = write_yaml("base.yaml", "a:\n  b: 1\n")
        over = write_yaml("over.yaml", "a: flat\n")

        values, _ = load_values([base, over])
        assert values == {"a": "flat"}

        with pytest.raises(TypeConflictError):
            load_values([base, over], ConflictPolicy.STRICT)

    def test_integer_keys(self, write_yaml) -> None:
        """Top-level non-string keys from YAML are stringified."""
        path = write_yaml("ports.yaml", "80: http\nnested:\n  443: https\n")
        values, _ = load_values([path])
        assert values == {"80": "http", "nested": {443: "https"}}


class TestBuildValues:
    """Tests for build_values."""

    def test_overrides_after_files(self, write_yaml) -> None:
        """--set overrides win over every file."""
        base = write_yaml("base.yaml", "image:\n  tag: '1.0'\n")
        prod = write_yaml("prod.yaml", "image:\n  tag: '2.0'\n")

        values = build_values([base, prod], ["image.tag=3.0"])

        assert values == {"image": {"tag": "3.0"}}

    def test_multiple_set_strings(self, write_yaml) -> None:
        """Each --set string is applied in order."""
        base = write_yaml("base.yaml", "a: 1\n")
        values = build_values([base], ["a=2,b.c=x", "a=3"])
        assert values == {"a": "3", "b": {"c": "x"}}

    def test_override_into_integer_keyed_mapping(self, write_yaml) -> None:
        """Overrides coerce mappings with non-string keys on the way."""
        path = write_yaml("ports.yaml", "service:\n  ports:\n    80: http\n")
        values = build_values([path], ["service.ports.443=https"])
        assert values == {"service": {"ports": {"80": "http", "443": "https"}}}

    def test_no_sources(self) -> None:
        """Nothing loaded, nothing set."""
        assert build_values([]) == {}

    def test_override_through_yaml_alias(self, write_yaml) -> None:
        """An anchored mapping and its alias are separate nodes once loaded."""
        path = write_yaml(
            "anchors.yaml",
            "top:\n  base: &b {x: 1}\n  other: *b\n",
        )
        values = build_values([path], ["top.base.x=2"])
        assert values == {"top": {"base": {"x": "2"}, "other": {"x": 1}}}
