"""Tests for interactive config creation."""

import io
import json
from unittest.mock import patch

import pytest
from rich.console import Console

from rvp.builder import ConfigBuilder, create_config, is_valid_url
from rvp.config.loader import load_config
from rvp.core.models import Configuration, ResourceSpec, SelectorSpec


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120)


def answers(prompts, confirms):
    """Patch Prompt.ask and Confirm.ask with scripted answers."""
    return (
        patch("rvp.builder.Prompt.ask", side_effect=prompts),
        patch("rvp.builder.Confirm.ask", side_effect=confirms),
    )


class TestIsValidUrl:
    """Tests for URL validation."""

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "http://example.com/quote/%%",
        "https://%%.example.com/",
    ])
    def test_valid(self, url):
        """Test absolute http(s) URLs with or without placeholder."""
        assert is_valid_url(url)

    @pytest.mark.parametrize("url", ["example.com", "ftp://example.com", "https://", "%%"])
    def test_invalid(self, url):
        """Test relative and non-http URLs are rejected."""
        assert not is_valid_url(url)


class TestConfigBuilder:
    """Tests for ConfigBuilder prompts."""

    def test_single_resource(self, console):
        """Test one resource with one selector."""
        prompt, confirm = answers(
            ["Quotes", "https://example.com/quote/%%", "h1", "Title"],
            [False, False],
        )
        with prompt, confirm:
            config = ConfigBuilder(console).build("quotes")

        assert config == Configuration(
            name="quotes",
            description="Quotes",
            resources=[
                ResourceSpec(
                    url_template="https://example.com/quote/%%",
                    selectors=[SelectorSpec(name="Title", selector="h1")],
                ),
            ],
        )

    def test_multiple_selectors_and_resources(self, console):
        """Test adding selectors and resources in a loop."""
        prompt, confirm = answers(
            [
                "",
                "https://a.test/", "h1", "Title", ".price", "Price",
                "https://b.test/%%", "#cap", "Cap",
            ],
            [True, False, True, False, False],
        )
        with prompt, confirm:
            config = ConfigBuilder(console).build("multi")

        assert config.description == ""
        assert [r.url_template for r in config.resources] == ["https://a.test/", "https://b.test/%%"]
        assert [s.name for s in config.resources[0].selectors] == ["Title", "Price"]
        assert config.resources[1].selectors == (SelectorSpec(name="Cap", selector="#cap"),)

    def test_reprompts_invalid_input(self, console):
        """Test empty, invalid URL, invalid CSS and duplicate names are asked again."""
        prompt, confirm = answers(
            [
                "",
                "", "not a url", "https://a.test/",
                "div >", "h1", "Title",
                "h2", "Title", "Subtitle",
            ],
            [True, False, False],
        )
        with prompt, confirm:
            config = ConfigBuilder(console).build("retry")

        assert config.resources[0].selectors == (
            SelectorSpec(name="Title", selector="h1"),
            SelectorSpec(name="Subtitle", selector="h2"),
        )
        output = console.file.getvalue()
        assert "This field is required" in output
        assert "Must be a valid http(s) URL" in output
        assert "already used" in output


class TestCreateConfig:
    """Tests for create_config."""

    def test_writes_file(self, console, tmp_path):
        """Test config is saved in the requested format."""
        prompt, confirm = answers(["", "https://example.com", "body > div > h1", "Title"], [False, False])
        with prompt, confirm:
            path = create_config(name="site", fmt="json", directory=str(tmp_path), console=console)

        assert path == tmp_path / "site.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["name"] == "site"
        assert load_config(path).resources[0].selectors[0].selector == "body > div > h1"

    def test_declined_overwrite(self, console, tmp_path):
        """Test existing file is kept when overwrite is declined."""
        existing = tmp_path / "site.toml"
        existing.write_text("resources = []\n", encoding="utf-8")

        prompt, confirm = answers([], [False])
        with prompt, confirm:
            path = create_config(name="site", directory=str(tmp_path), console=console)

        assert path is None
        assert existing.read_text(encoding="utf-8") == "resources = []\n"

    def test_accepted_overwrite(self, console, tmp_path):
        """Test existing file is replaced when overwrite is accepted."""
        (tmp_path / "site.toml").write_text("resources = []\n", encoding="utf-8")

        prompt, confirm = answers(["", "https://example.com", "h1", "Title"], [True, False, False])
        with prompt, confirm:
            path = create_config(name="site", directory=str(tmp_path), console=console)

        assert len(load_config(path).resources) == 1
