"""
Unit tests for the ollama-mcp-config CLI tool.
"""

import json
import os
from unittest.mock import patch

import yaml
from typer.testing import CliRunner

from ollama_mcp.cli.config_cli import app
from ollama_mcp.config import get_settings

runner = CliRunner()


class TestConfigCLI:
    """Test ollama-mcp-config CLI commands."""

    def setup_method(self):
        """Clear settings cache before each test."""
        get_settings.cache_clear()

    def test_init_command(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "[OK] Created config.yaml" in result.output

        config = yaml.safe_load((tmp_path / "config.yaml").read_text())
        assert config["ollama"]["context_size"] == 32000
        assert config["ollama"]["code_model"] == "qwen3-coder:30b"
        assert config["ollama"]["chat_model"] == "gpt-oss:20b"
        assert config["logging"]["level"] == "INFO"

    def test_init_keeps_existing_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yaml").write_text("existing: config")

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "[SKIP]" in result.output
        assert (tmp_path / "config.yaml").read_text() == "existing: config"

    def test_init_force(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yaml").write_text("existing: config")

        result = runner.invoke(app, ["init", "--force"])

        assert result.exit_code == 0
        assert "ollama:" in (tmp_path / "config.yaml").read_text()

    def test_init_template_is_loadable(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner.invoke(app, ["init"])

        env = {"OLLAMA_MCP_CONFIG_FILE": str(tmp_path / "config.yaml")}
        with patch.dict(os.environ, env):
            result = runner.invoke(app, ["validate"])

        assert result.exit_code == 0, result.output
        assert "[OK] Configuration is valid!" in result.output
        assert "http://127.0.0.1:11434" in result.output

    def test_validate_reports_endpoint(self):
        with patch.dict(os.environ, {"OLLAMA_HOST": "https://gpu.example.com"}):
            result = runner.invoke(app, ["validate"])

        assert result.exit_code == 0
        assert "https://gpu.example.com:443" in result.output

    def test_validate_invalid_endpoint(self):
        with patch.dict(os.environ, {"OLLAMA_HOST": "ftp://gpu.example.com"}):
            result = runner.invoke(app, ["validate"])

        assert result.exit_code == 1
        assert "unsupported scheme" in result.output

    def test_validate_invalid_log_level(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "CHATTY"}):
            result = runner.invoke(app, ["validate"])

        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_show_yaml(self):
        result = runner.invoke(app, ["show"])

        assert result.exit_code == 0
        config = yaml.safe_load(result.output)
        assert config["ollama"]["chat_model"] == "gpt-oss:20b"

    def test_show_json(self):
        with patch.dict(os.environ, {"OLLAMA_CHAT_MODEL": "llama3.2"}):
            result = runner.invoke(app, ["show", "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["ollama"]["chat_model"] == "llama3.2"

    def test_show_env(self):
        result = runner.invoke(app, ["show", "--format", "env"])

        assert result.exit_code == 0
        assert "OLLAMA_CONTEXT_SIZE=32000" in result.output

    def test_show_key(self):
        with patch.dict(os.environ, {"OLLAMA_KEEP_ALIVE": "5m"}):
            result = runner.invoke(app, ["show", "ollama.keep_alive"])

        assert result.exit_code == 0
        assert result.output.strip() == "5m"

    def test_show_section(self):
        result = runner.invoke(app, ["show", "ollama"])

        assert result.exit_code == 0
        assert "ollama.code_model=qwen3-coder:30b" in result.output

    def test_show_unset_key(self):
        result = runner.invoke(app, ["show", "ollama.host"])

        assert result.exit_code == 0
        assert result.output.strip() == "null"
        assert "not found" not in result.output

    def test_show_missing_key(self):
        result = runner.invoke(app, ["show", "ollama.nope"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_export_env(self, tmp_path):
        output = tmp_path / ".env"
        with patch.dict(os.environ, {"OLLAMA_HOST": "gpu:11434"}):
            result = runner.invoke(app, ["export-env", "--output", str(output)])

        assert result.exit_code == 0
        lines = output.read_text().splitlines()
        assert "OLLAMA_HOST=gpu:11434" in lines
        assert "OLLAMA_CHAT_MODEL=gpt-oss:20b" in lines
        assert lines == sorted(lines)
