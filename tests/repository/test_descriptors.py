"""Tests for YAML project descriptors."""

from __future__ import annotations

from pathlib import Path

import pytest

from depbridge.core.coordinates import Dependency, Exclusion, ProjectModel
from depbridge.exceptions import DescriptorError
from depbridge.repository import dump_model, load_model, load_model_file, model_from_dict

FULL_DESCRIPTOR = """\
groupId: org.example
artifactId: app
version: "1.0.0"
packaging: war
dependencies:
  - org.example:util:2.1.0
  - org.example:testkit:1.0:test
  - groupId: org.example
    artifactId: logging
    version: "[1.0,2.0)"
    scope: runtime
    optional: true
    exclusions:
      - groupId: org.legacy
        artifactId: "*"
      - org.old:thing
dependencyManagement:
  - org.example:util:2.2.0
"""


class TestLoadModel:
    """Parsing descriptors."""

    def test_full_descriptor(self) -> None:
        model = load_model(FULL_DESCRIPTOR)
        assert (model.group_id, model.artifact_id, model.version, model.packaging) == (
            "org.example", "app", "1.0.0", "war",
        )
        assert [d.artifact_id for d in model.dependencies] == ["util", "testkit", "logging"]
        assert model.dependencies[1].scope == "test"
        logging_dep = model.dependencies[2]
        assert logging_dep.version == "[1.0,2.0)"
        assert logging_dep.optional
        assert logging_dep.exclusions == (
            Exclusion("org.legacy", "*"),
            Exclusion("org.old", "thing"),
        )
        assert model.dependency_management == [Dependency("org.example", "util", "2.2.0")]

    def test_minimal_descriptor_defaults(self) -> None:
        model = load_model("groupId: g\nartifactId: a\nversion: '1.0'\n")
        assert model.packaging == "jar"
        assert model.dependencies == []

    @pytest.mark.parametrize(
        "text, message",
        [
            ("- not\n- a mapping\n", "must be a mapping"),
            ("groupId: g\nversion: '1.0'\n", "artifactId"),
            ("groupId: g\nartifactId: a\nversion: '1'\ndependencies: nope\n", "must be a list"),
            ("groupId: g\nartifactId: a\nversion: '1'\ndependencies: [42]\n", "invalid dependency"),
            ("groupId: [unclosed\n", "invalid YAML"),
        ],
    )
    def test_malformed_descriptors(self, text: str, message: str) -> None:
        with pytest.raises(DescriptorError, match=message):
            load_model(text, "bad.yaml")

    @pytest.mark.parametrize(
        "text",
        [
            "groupId: g\nartifactId: a\nversion: 1.10\n",
            "groupId: g\nartifactId: a\nversion: 2\n",
            "groupId: g\nartifactId: a\nversion: '1.0'\n"
            "dependencies:\n  - {groupId: x, artifactId: y, version: 2.10}\n",
        ],
    )
    def test_unquoted_numeric_version_rejected(self, text: str) -> None:
        with pytest.raises(DescriptorError, match="must be a quoted string"):
            load_model(text, "bad.yaml")

    def test_quoted_version_kept_verbatim(self) -> None:
        model = load_model(
            "groupId: g\nartifactId: a\nversion: '1.10'\n"
            "dependencies:\n  - {groupId: x, artifactId: y, version: \"2.10\"}\n"
        )
        assert model.version == "1.10"
        assert model.dependencies[0].version == "2.10"

    def test_invalid_scope(self) -> None:
        with pytest.raises(DescriptorError, match="Invalid scope"):
            model_from_dict({
                "groupId": "g", "artifactId": "a", "version": "1",
                "dependencies": [{"groupId": "x", "artifactId": "y", "version": "1", "scope": "bad"}],
            })


class TestDumpModel:
    """Serializing descriptors."""

    def test_dump_then_load_preserves_model(self) -> None:
        model = ProjectModel(
            "g", "a", "1.0", "jar",
            [Dependency("x", "y", "[1,2)", scope="runtime", exclusions=(Exclusion("z", "*"),))],
            [Dependency("x", "y", "1.5")],
        )
        assert load_model(dump_model(model)) == model

    def test_defaults_are_omitted(self) -> None:
        text = dump_model(ProjectModel("g", "a", "1.0", dependencies=[Dependency("x", "y", "1")]))
        assert "scope" not in text
        assert "optional" not in text


class TestLoadModelFile:
    """Reading descriptor files."""

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text(FULL_DESCRIPTOR, encoding="utf-8")
        assert load_model_file(path).artifact_id == "app"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DescriptorError, match="Cannot read descriptor"):
            load_model_file(tmp_path / "missing.yaml")
