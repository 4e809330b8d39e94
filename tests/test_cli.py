"""Tests for the command line entry point."""

import logging

from huegraph import __main__ as cli


class TestCli:
    def test_parse_args(self):
        args = cli.parse_args(["--tree", "--once", "--log-level", "DEBUG"])
        assert args.tree and args.once
        assert not args.table
        assert args.log_level == "DEBUG"

    def test_missing_configuration_exits_with_2(self, monkeypatch, tmp_path, caplog):
        for name in ("HUE_BRIDGE_IP", "HUE_APP_KEY", "V2_APP_KEY", "APP_KEY"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(tmp_path)

        with caplog.at_level(logging.ERROR):
            assert cli.main(["--once"]) == 2
        assert "HUE_BRIDGE_IP" in caplog.text
