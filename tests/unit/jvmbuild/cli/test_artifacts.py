"""Tests for jvmbuild artifacts commands."""

import json

import pytest
import yaml
from click.testing import CliRunner

from jvmbuild.cli import main
from jvmbuild.contracts.types import ArtifactBuildState
from jvmbuild.models import ArtifactBuild
from jvmbuild.naming import generate_resource_name


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, store):
    def _invoke(*args):
        return runner.invoke(main, list(args), obj={"store": store})
    return _invoke


class TestArtifactsCreate:
    def test_creates_artifact_build(self, invoke, store):
        result = invoke("artifacts", "create", "org.foo:bar:1.2.3")
        assert result.exit_code == 0, result.output

        name = generate_resource_name("org.foo:bar:1.2.3")
        assert f"Created ArtifactBuild {name}" in result.output
        abr = store.get(ArtifactBuild, "test-namespace", name)
        assert abr.gav == "org.foo:bar:1.2.3"
        assert abr.state == ArtifactBuildState.NEW

    def test_existing_is_reported(self, invoke, make_artifact_build):
        make_artifact_build(gav="org.foo:bar:1.2.3", state=ArtifactBuildState.COMPLETE)
        result = invoke("artifacts", "create", "org.foo:bar:1.2.3")
        assert result.exit_code == 0, result.output
        assert "already exists" in result.output
        assert "ArtifactBuildComplete" in result.output

    def test_rejects_malformed_gav(self, invoke):
        result = invoke("artifacts", "create", "org.foo:bar")
        assert result.exit_code == 2
        assert "group:artifact:version" in result.output

    def test_namespace_option(self, invoke, store):
        invoke("artifacts", "create", "org.foo:bar:1", "--namespace", "other")
        assert len(store.list(ArtifactBuild, "other")) == 1
        assert store.list(ArtifactBuild, "test-namespace") == []


class TestArtifactsList:
    def test_empty(self, invoke):
        result = invoke("artifacts", "list")
        assert result.exit_code == 0
        assert "No ArtifactBuilds found." in result.output

    def test_sorted_by_gav(self, invoke, make_artifact_build):
        make_artifact_build(gav="org.zed:z:1")
        make_artifact_build(gav="org.abc:a:1")
        result = invoke("artifacts", "list")
        lines = result.output.strip().splitlines()
        assert lines[0].startswith("org.abc:a:1")
        assert lines[1].startswith("org.zed:z:1")

    def test_state_filters(self, invoke, make_artifact_build):
        make_artifact_build(gav="g:failed:1", state=ArtifactBuildState.FAILED)
        make_artifact_build(gav="g:missing:1", state=ArtifactBuildState.MISSING)
        make_artifact_build(gav="g:new:1")

        result = invoke("artifacts", "list", "--failed", "--missing")
        assert "g:failed:1" in result.output
        assert "g:missing:1" in result.output
        assert "g:new:1" not in result.output


class TestArtifactsRebuild:
    def test_resets_to_new(self, invoke, store, make_artifact_build):
        abr = make_artifact_build(state=ArtifactBuildState.FAILED)
        result = invoke("artifacts", "rebuild", abr.name)

        assert result.exit_code == 0, result.output
        assert "from ArtifactBuildFailed to ArtifactBuildNew" in result.output
        assert store.get(ArtifactBuild, "test-namespace", abr.name).state == ArtifactBuildState.NEW

    def test_not_found(self, invoke):
        result = invoke("artifacts", "rebuild", "nope")
        assert result.exit_code == 1
        assert "not found" in result.output


class TestArtifactsShow:
    def test_yaml(self, invoke, make_artifact_build):
        abr = make_artifact_build()
        result = invoke("artifacts", "show", abr.name)
        data = yaml.safe_load(result.output)
        assert data["kind"] == "ArtifactBuild"
        assert data["spec"]["gav"] == "org.foo:bar:1.2.3"

    def test_json(self, invoke, make_artifact_build):
        abr = make_artifact_build()
        result = invoke("artifacts", "show", abr.name, "--format", "json")
        assert json.loads(result.output)["metadata"]["name"] == abr.name
