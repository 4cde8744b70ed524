"""
Interactive creation of configuration files.

Asks for resources (URL templates) and their named selectors, then writes
the result as TOML or JSON.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import structlog
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from .config.loader import ConfigLoader
from .core.exceptions import ConfigurationError
from .core.models import URL_PARAM_PLACEHOLDER, Configuration, ResourceSpec, SelectorSpec
from .core.selectors import validate_selector

logger = structlog.get_logger(__name__)


def is_valid_url(url: str) -> bool:
    """Check that url is an absolute http(s) URL (placeholder allowed)."""
    parsed = urlparse(url.replace(URL_PARAM_PLACEHOLDER, "x"))
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ConfigBuilder:
    """Prompts the user for a Configuration."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _ask_required(self, prompt: str, hint: str = "") -> str:
        while True:
            if hint:
                self.console.print(f"[dim]e.g. {hint}[/dim]")
            value = Prompt.ask(prompt, console=self.console).strip()
            if value:
                return value
            self.console.print("[red]This field is required[/red]")

    def ask_url(self) -> str:
        while True:
            url = self._ask_required("Site URL", f"https://example.com/quote/{URL_PARAM_PLACEHOLDER}")
            if is_valid_url(url):
                return url
            self.console.print("[red]Must be a valid http(s) URL[/red]")

    def ask_selector(self) -> str:
        while True:
            selector = self._ask_required("Selector path", "body > div > h1")
            try:
                validate_selector(selector)
                return selector
            except ConfigurationError as e:
                self.console.print(f"[red]{escape(str(e))}[/red]")

    def ask_name(self, taken: set[str]) -> str:
        while True:
            name = self._ask_required("Name", "Title")
            if name not in taken:
                return name
            self.console.print(f"[red]Name {name!r} is already used for this resource[/red]")

    def ask_selectors(self) -> list[SelectorSpec]:
        selectors: list[SelectorSpec] = []
        names: set[str] = set()

        while True:
            selector = self.ask_selector()
            name = self.ask_name(names)

            names.add(name)
            selectors.append(SelectorSpec(name=name, selector=selector))

            if not Confirm.ask("Add another selector?", default=False, console=self.console):
                return selectors

    def ask_resources(self) -> list[ResourceSpec]:
        resources = []
        while True:
            url = self.ask_url()
            resources.append(ResourceSpec(url_template=url, selectors=self.ask_selectors()))

            if not Confirm.ask("Add another resource?", default=False, console=self.console):
                return resources

    def build(self, name: str) -> Configuration:
        description = Prompt.ask(
            "Config description (optional)",
            default="",
            show_default=False,
            console=self.console,
        )
        return Configuration(
            resources=self.ask_resources(),
            name=name,
            description=description.strip(),
        )


def create_config(
    name: str = "default",
    fmt: str = "toml",
    directory: Optional[str] = None,
    console: Optional[Console] = None,
) -> Optional[Path]:
    """
    Interactively build a configuration and save it as <name>.<fmt>.

    Args:
        name: Base name of the config file
        fmt: "toml" or "json"
        directory: Target directory (defaults to the current directory)
        console: Rich console for prompts

    Returns:
        Path written, or None if the user declined to overwrite
    """
    builder = ConfigBuilder(console)
    loader = ConfigLoader(directory)
    filename = f"{name}.{fmt}"

    target = loader.resolve_path(filename)
    if target.exists() and not Confirm.ask(
        f"{target} already exists. Overwrite?", default=False, console=builder.console
    ):
        logger.info("config_not_saved", file=str(target))
        return None

    builder.console.print(f"Creating new config file [bold]{filename}[/bold]")
    config = builder.build(name)
    path = loader.save(config, filename, fmt)

    builder.console.print("Done! You can edit the config file later.")
    return path
