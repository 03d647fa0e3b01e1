"""Tests for icon_mcp.__main__ — CLI dispatcher."""

import json
import sys
from unittest.mock import patch

import icon_mcp.server as server
from icon_mcp.engine import IconSearchEngine


class TestCli:
    """CLI dispatcher routes subcommands correctly."""

    @patch("icon_mcp.server.main")
    def test_default_runs_server(self, mock_main):
        from icon_mcp.__main__ import _cli

        with patch.object(sys, "argv", ["icon-mcp"]):
            _cli()
        mock_main.assert_called_once()

    @patch("icon_mcp.server.main")
    def test_unknown_arg_runs_server(self, mock_main):
        from icon_mcp.__main__ import _cli

        with patch.object(sys, "argv", ["icon-mcp", "--help"]):
            _cli()
        mock_main.assert_called_once()

    def test_search_subcommand(self):
        with patch("icon_mcp.__main__._search") as mock_search:
            from icon_mcp.__main__ import _cli

            with patch.object(sys, "argv", ["icon-mcp", "search", "home", "2"]):
                _cli()
            mock_search.assert_called_once_with("home", 2)


def test_search_prints_json(make_provider, capsys):
    from icon_mcp.__main__ import _search

    provider = make_provider("iconify", pages={1: ["mdi:home"]})
    engine = IconSearchEngine(providers=[provider])
    with patch.object(server, "_engine", engine):
        _search("home")

    data = json.loads(capsys.readouterr().out)
    assert data["query"] == "home"
    assert data["total"] == 1
    assert data["icons"][0]["qualified_name"] == "mdi:home"
    assert "error" not in data


def test_search_prints_error_on_total_failure(make_provider, capsys):
    from icon_mcp.__main__ import _search

    provider = make_provider("iconify", pages={1: ["mdi:home"]})
    engine = IconSearchEngine(providers=[provider])
    with (
        patch.object(server, "_engine", engine),
        patch("icon_mcp.engine.normalize_many", side_effect=RuntimeError("boom")),
    ):
        _search("home")

    data = json.loads(capsys.readouterr().out)
    assert data["icons"] == []
    assert data["error"] == "boom"
