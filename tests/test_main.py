"""Tests for main.py entry point."""

import json

import pytest


@pytest.fixture
def recording_file(tmp_path, trading_recording):
    path = tmp_path / "avantis-trade.json"
    path.write_text(json.dumps(trading_recording.to_dict()), encoding="utf-8")
    return path


class TestBuildParser:
    """Tests for build_parser function."""

    def test_subcommands(self):
        """Test each subcommand parses its recording argument."""
        from dapp_intent.main import build_parser

        parser = build_parser()
        for command in ("analyze", "intents", "clarify"):
            args = parser.parse_args([command, "rec.json"])
            assert args.command == command
            assert args.recording == "rec.json"

    def test_global_options(self):
        from dapp_intent.main import build_parser

        args = build_parser().parse_args(["--log-level", "DEBUG", "--json-logs", "analyze", "--json", "r.json"])

        assert args.log_level == "DEBUG"
        assert args.json_logs is True
        assert args.json is True

    def test_command_required(self):
        from dapp_intent.main import build_parser

        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestRun:
    """Tests for run function."""

    def test_analyze_summary(self, recording_file, capsys):
        """Test the human-readable analysis summary."""
        from dapp_intent.main import run

        assert run(["analyze", str(recording_file)]) == 0

        out = capsys.readouterr().out
        assert "RECORDING ANALYSIS" in out
        assert "Name: avantis-trade" in out
        assert "Test type: connection" in out
        assert "Connection pattern: privy" in out
        assert "wallet_connect (steps 1-4, 90% confidence)" in out
        assert "chain_id: 8453" in out
        assert "web3: 6" in out
        assert "5 clarification(s) would be needed" in out

    def test_analyze_json(self, recording_file, capsys):
        from dapp_intent.main import run

        assert run(["analyze", "--json", str(recording_file)]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["recording_name"] == "avantis-trade"
        assert data["primary_flow_type"] == "trade_open"

    def test_intents(self, recording_file, capsys):
        from dapp_intent.main import run

        assert run(["intents", str(recording_file)]) == 0

        steps = json.loads(capsys.readouterr().out)
        assert [s["id"] for s in steps] == [f"step-{n}" for n in range(1, 8)]
        assert steps[4]["description"] == "Execute trade: Place Order"

    def test_clarify(self, recording_file, capsys):
        from dapp_intent.main import run

        assert run(["clarify", str(recording_file)]) == 0

        questions = json.loads(capsys.readouterr().out)
        assert [q["type"] for q in questions] == ["selector"] * 4 + ["wait"]

    def test_settings_from_env(self, recording_file, capsys, monkeypatch):
        """Test clarification thresholds come from the environment."""
        from dapp_intent.main import run

        monkeypatch.setenv("DAPP_INTENT_DEFAULT_CHAIN_ID", "10")

        assert run(["clarify", str(recording_file)]) == 0

        ids = [q["id"] for q in json.loads(capsys.readouterr().out)]
        assert "network-setup" in ids

    def test_missing_file(self, tmp_path, capsys):
        from dapp_intent.main import run

        assert run(["analyze", str(tmp_path / "missing.json")]) == 1
        assert capsys.readouterr().out == ""

    def test_invalid_recording(self, tmp_path):
        from dapp_intent.main import run

        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"name": "x", "startUrl": "y", "steps": [{"id": "1"}]}), encoding="utf-8")

        assert run(["intents", str(path)]) == 1

    def test_non_utf8_file(self, tmp_path, capsys):
        from dapp_intent.main import run

        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe\x00\x00")

        assert run(["intents", str(path)]) == 1
        assert capsys.readouterr().out == ""

    def test_directory_instead_of_file(self, tmp_path, capsys):
        from dapp_intent.main import run

        assert run(["analyze", str(tmp_path)]) == 1
        assert capsys.readouterr().out == ""

    def test_cli_exits_with_code(self, recording_file, monkeypatch):
        from dapp_intent import main

        monkeypatch.setattr("sys.argv", ["dapp-intent", "analyze", "--json", str(recording_file)])

        with pytest.raises(SystemExit) as exc_info:
            main.cli()
        assert exc_info.value.code == 0
