"""Tests for the kubecloud CLI."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from conftest import CA_PEM, dump_kubeconfig, make_public_key

from kubecloud import __version__
from kubecloud.cli.main import REDACTED, cli


def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def kubeconfig_file(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "kubeconfig.yaml"
    path.write_text(dump_kubeconfig(), encoding="utf-8")
    return path


class TestVersion:
    def test_version(self):
        result = runner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# --- contexts command ---


class TestContextsCommand:
    def test_lists_contexts(self, kubeconfig_file: Path):
        result = runner().invoke(cli, ["contexts", str(kubeconfig_file)])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0].startswith("* ctx-a")
        assert "cluster=cluster-a user=admin-a" in lines[0]
        assert lines[1].startswith("  ctx-b")

    def test_no_contexts(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "empty.yaml"
        path.write_text("apiVersion: v1\n", encoding="utf-8")
        result = runner().invoke(cli, ["contexts", str(path)])
        assert result.exit_code == 0
        assert "No contexts found." in result.output

    def test_invalid_kubeconfig(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "bad.yaml"
        path.write_text("clusters: [unclosed", encoding="utf-8")
        result = runner().invoke(cli, ["contexts", str(path)])
        assert result.exit_code == 1
        assert "Error: parsing kubernetes configuration data" in result.output

    def test_missing_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner().invoke(cli, ["contexts", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "cannot read kubeconfig" in result.output

    def test_kubeconfig_from_project_config(self, kubeconfig_file: Path, tmp_path: Path):
        (tmp_path / "kubecloud.yaml").write_text(
            "kubeconfig: ./kubeconfig.yaml\n", encoding="utf-8",
        )
        result = runner().invoke(cli, ["contexts"])
        assert result.exit_code == 0
        assert "ctx-a" in result.output

    def test_no_kubeconfig_anywhere(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner().invoke(cli, ["contexts"])
        assert result.exit_code == 1
        assert "no kubeconfig given" in result.output


# --- inspect command ---


class TestInspectCommand:
    def test_text_output(self, kubeconfig_file: Path):
        result = runner().invoke(cli, [
            "inspect", str(kubeconfig_file), "--name", "k8s",
            "--parent-cloud", "aws", "--parent-region", "us-east-1",
        ])
        assert result.exit_code == 0
        assert "Context:           ctx-a" in result.output
        assert "Endpoint:          https://10.0.0.1:6443" in result.output
        assert "Host cloud region: aws/us-east-1" in result.output
        assert "Credential:        k8s (clientcertificate)" in result.output
        assert f"ClientKeyData: {REDACTED}" in result.output

    def test_json_output(self, kubeconfig_file: Path):
        result = runner().invoke(cli, [
            "inspect", str(kubeconfig_file), "-n", "k8s",
            "--context", "ctx-b", "--storage-class", "fast-ssd", "--json-output",
        ])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["context"] == "ctx-b"
        assert data["cloud"]["host_cloud_region"] == "other"
        assert data["cloud"]["config"] == {
            "operator-storage": "fast-ssd",
            "workload-storage": "fast-ssd",
        }
        assert data["credential"]["auth_type"] == "oauth2"
        assert data["credential"]["attributes"] == {"Token": REDACTED}
        assert "credential_uid" not in data

    def test_show_secrets(self, kubeconfig_file: Path):
        result = runner().invoke(cli, [
            "inspect", str(kubeconfig_file), "-n", "k8s", "--json-output", "--show-secrets",
        ])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["cloud"]["ca_certificates"] == [CA_PEM]
        assert data["credential"]["attributes"]["ClientKeyData"].startswith("-----BEGIN")

    def test_settings_from_project_config(self, kubeconfig_file: Path, tmp_path: Path):
        (tmp_path / "kubecloud.yaml").write_text(
            "kubeconfig: ./kubeconfig.yaml\n"
            "context: ctx-b\n"
            "parent_cloud_name: gce\n"
            "parent_cloud_region: europe-west1\n",
            encoding="utf-8",
        )
        result = runner().invoke(cli, ["inspect", "-n", "k8s", "--json-output"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["context"] == "ctx-b"
        assert data["cloud"]["host_cloud_region"] == "gce/europe-west1"

    def test_unknown_context(self, kubeconfig_file: Path):
        result = runner().invoke(cli, [
            "inspect", str(kubeconfig_file), "-n", "k8s", "--context", "nope",
        ])
        assert result.exit_code == 1
        assert "Error: parsing kubernetes configuration data: kubernetes context 'nope' not found" in result.output

    def test_name_required(self, kubeconfig_file: Path):
        result = runner().invoke(cli, ["inspect", str(kubeconfig_file)])
        assert result.exit_code != 0
        assert "--name" in result.output


# --- fingerprint command ---


class TestFingerprintCommand:
    def test_prints_fingerprints(self, tmp_path: Path):
        keys = tmp_path / "authorized_keys"
        keys.write_text(
            "# team keys\n\n"
            + make_public_key("alice@laptop", seed=1) + "\n"
            + make_public_key(seed=2) + "\n",
            encoding="utf-8",
        )
        result = runner().invoke(cli, ["fingerprint", str(keys)])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert len(lines) == 2
        assert lines[0].endswith("  alice@laptop")
        assert len(lines[1].split(":")) == 16

    def test_invalid_key_exits_nonzero(self, tmp_path: Path):
        keys = tmp_path / "authorized_keys"
        keys.write_text(make_public_key("ok") + "\nssh-rsa garbage\n", encoding="utf-8")
        result = runner().invoke(cli, ["fingerprint", str(keys)])
        assert result.exit_code == 1
        assert "INVALID" in result.output
