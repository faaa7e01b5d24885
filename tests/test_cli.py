from typer.testing import CliRunner

from linkrelay import cli
from linkrelay.cli import app
from linkrelay.relay.messages import ErrorMessage, TextMessage


def test_version_flag():
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip()


def test_fetch_command_builds_config(monkeypatch, tmp_path):
    seen = {}

    def fake_fetch_once(cfg, link):
        seen["cfg"], seen["link"] = cfg, link
        return TextMessage("ok")

    monkeypatch.setattr(cli, "fetch_once", fake_fetch_once)
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["fetch", "example.com", "--scratch-dir", str(tmp_path), "--strategy", "requests", "--strategy", "httpx"],
    )
    assert result.exit_code == 0
    assert seen["link"] == "example.com"
    assert seen["cfg"].strategies == ["requests", "httpx"]
    assert seen["cfg"].scratch_dir == tmp_path


def test_fetch_command_fails_on_error_reply(monkeypatch):
    monkeypatch.setattr(cli, "fetch_once", lambda cfg, link: ErrorMessage("❌ Could not fetch: x"))
    result = CliRunner().invoke(app, ["fetch", "example.com"])
    assert result.exit_code == 1
