"""Tests for the command line interface."""

import json
from unittest.mock import patch

import pytest

from rvp.__main__ import (
    EXIT_CONFIG_ERROR,
    EXIT_FAILED,
    EXIT_OK,
    build_parser,
    main,
)
from rvp.core.exceptions import FetchError

PAGES = {
    "https://quotes.test/AAPL": "<html><body><h1>Apple</h1><b class='p'>$189.5</b></body></html>",
    "https://quotes.test/MSFT": "<html><body><h1>Microsoft</h1><b class='p'>1.2k</b></body></html>",
    "https://example.com": "<html><body><div><h1>Example Domain</h1></div></body></html>",
}

CONFIG = """
[[resources]]
url = "https://quotes.test/%%"
selectors = [
  { name = "Name", selector = "h1" },
  { name = "Price", selector = ".p" },
]
"""


class FakeHttpClient:
    """Serves PAGES instead of going to the network."""

    instances = []

    def __init__(self, timeout=30.0, max_retries=0, transport=None):
        self.timeout = timeout
        self.max_retries = max_retries
        self.fetched = []
        FakeHttpClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def fetch_text(self, url):
        self.fetched.append(url)
        if url not in PAGES:
            raise FetchError(url, "HTTP 404")
        return PAGES[url]


@pytest.fixture(autouse=True)
def fake_http():
    FakeHttpClient.instances = []
    with patch("rvp.orchestrator.HttpClient", FakeHttpClient):
        yield


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "quotes.toml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


def run(argv) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestParser:
    """Tests for argument parsing."""

    def test_params_and_one_param_exclusive(self):
        """Test --params and --one-param cannot be combined."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["batch", "-p", "x.toml", "--one-param", "a", "--params", "b"])

    def test_params_list(self):
        """Test --params collects multiple values."""
        args = build_parser().parse_args(["batch", "--path", "x.toml", "--params", "a", "b"])
        assert args.params == ["a", "b"]
        assert args.one_param is None

    def test_global_options(self):
        """Test timeout and retries options."""
        args = build_parser().parse_args(["--timeout", "5", "--retries", "2", "grab", "-s", "h1", "-f", "u"])
        assert args.timeout == 5.0
        assert args.retries == 2
        assert args.url == "u"


class TestGrabCommand:
    """Tests for the grab command."""

    def test_prints_value(self, capsys):
        """Test grabbed value is printed as plain text."""
        code = run(["grab", "--selector", "body > div > h1", "--from", "https://example.com"])

        assert code == EXIT_OK
        assert capsys.readouterr().out == "Example Domain\n"

    def test_not_found(self, capsys):
        """Test missing selector exits non-zero with message on stderr."""
        code = run(["grab", "-s", "h2", "-f", "https://example.com"])

        captured = capsys.readouterr()
        assert code == EXIT_FAILED
        assert captured.out == ""
        assert "selector not found" in captured.err

    def test_invalid_selector(self, capsys):
        """Test invalid CSS is a configuration error."""
        code = run(["grab", "-s", "div >", "-f", "https://example.com"])

        assert code == EXIT_CONFIG_ERROR
        assert FakeHttpClient.instances == []

    def test_timeout_passed_to_client(self):
        """Test --timeout reaches the HTTP client."""
        run(["--timeout", "3", "grab", "-s", "h1", "-f", "https://example.com"])
        assert FakeHttpClient.instances[0].timeout == 3.0


class TestBatchCommand:
    """Tests for the batch command."""

    def test_json_output(self, config_path, capsys):
        """Test JSON output in parameter order."""
        code = run(["batch", "--path", str(config_path), "--params", "MSFT", "AAPL", "--json"])

        assert code == EXIT_OK
        assert json.loads(capsys.readouterr().out) == [
            {"name": "Name", "value": "Microsoft"},
            {"name": "Price", "value": 1200},
            {"name": "Name", "value": "Apple"},
            {"name": "Price", "value": 189.5},
        ]

    def test_table_output(self, config_path, capsys):
        """Test table output shows names and source text."""
        code = run(["batch", "--path", str(config_path), "--one-param", "AAPL"])

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "Name" in out and "Value" in out
        assert "Apple" in out
        assert "$189.5" in out

    def test_partial_failure_exit_ok(self, config_path, capsys):
        """Test some failed items do not fail the command."""
        code = run(["batch", "--path", str(config_path), "--params", "AAPL", "NOPE", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == EXIT_OK
        assert data[2] == {"name": "Name", "value": "ERROR: fetch failed: HTTP 404"}

    def test_all_failed_exit_code(self, config_path, capsys):
        """Test every item failing exits non-zero."""
        code = run(["batch", "--path", str(config_path), "--one-param", "NOPE", "--json"])
        assert code == EXIT_FAILED

    def test_missing_params(self, config_path, capsys):
        """Test placeholder config without params fails before fetching."""
        code = run(["batch", "--path", str(config_path)])

        assert code == EXIT_CONFIG_ERROR
        assert FakeHttpClient.instances == []
        assert "Configuration error" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        """Test missing config file is a configuration error."""
        assert run(["batch", "--path", str(tmp_path / "nope.json")]) == EXIT_CONFIG_ERROR

    def test_bad_extension(self, tmp_path):
        """Test unsupported config format is a configuration error."""
        path = tmp_path / "config.yml"
        path.write_text("resources: []", encoding="utf-8")
        assert run(["batch", "--path", str(path)]) == EXIT_CONFIG_ERROR


class TestMisc:
    """Tests for top-level options."""

    def test_version(self, capsys):
        """Test --version."""
        assert run(["--version"]) == EXIT_OK
        assert capsys.readouterr().out.startswith("rvp ")

    def test_no_command(self, capsys):
        """Test missing subcommand prints help and fails."""
        assert run([]) == EXIT_CONFIG_ERROR

    def test_new_command(self, tmp_path):
        """Test new command delegates to the builder."""
        with patch("rvp.builder.create_config", return_value=tmp_path / "q.json") as create:
            code = run(["new", "--name", "q", "--format", "json"])

        assert code == EXIT_OK
        assert create.call_args.kwargs["name"] == "q"
        assert create.call_args.kwargs["fmt"] == "json"

    def test_edit_command(self, config_path):
        """Test edit command delegates to the editor."""
        with patch("rvp.editor.edit_config", return_value=config_path) as edit:
            code = run(["edit", "--path", str(config_path)])

        assert code == EXIT_OK
        assert edit.call_args.args[0] == str(config_path)

    def test_edit_missing_file(self, tmp_path):
        """Test editing a missing config file is a configuration error."""
        assert run(["edit", "--path", str(tmp_path / "nope.toml")]) == EXIT_CONFIG_ERROR

    def test_edit_requires_path(self):
        """Test edit without --path is a usage error."""
        assert run(["edit"]) == 2
