"""
Interactive editing of existing configuration files.

Resources and selectors can be added, changed or deleted. The file is
rewritten in its own format only after the user confirms.
"""

import dataclasses
from pathlib import Path
from typing import Optional, Union

import structlog
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from .builder import ConfigBuilder
from .config.loader import ConfigLoader, detect_format
from .core.models import Configuration, ResourceSpec, SelectorSpec

logger = structlog.get_logger(__name__)

CONFIG_ACTIONS = ["edit", "add", "delete", "done"]
RESOURCE_ACTIONS = ["url", "add", "rename", "path", "delete", "back"]


class ConfigEditor:
    """Prompts the user for changes to a Configuration."""

    def __init__(self, console: Optional[Console] = None):
        self.builder = ConfigBuilder(console)
        self.console = self.builder.console

    def _choose(self, prompt: str, labels: list[str]) -> Optional[int]:
        """Numbered pick from labels; None if there is nothing to pick."""
        if not labels:
            self.console.print(f"[yellow]No {prompt.lower()}s to choose from[/yellow]")
            return None

        for i, label in enumerate(labels, 1):
            self.console.print(f"  [cyan]{i}[/cyan] {escape(label)}")
        choice = Prompt.ask(
            prompt,
            choices=[str(i) for i in range(1, len(labels) + 1)],
            console=self.console,
        )
        return int(choice) - 1

    def edit_resource(self, resource: ResourceSpec) -> ResourceSpec:
        url = resource.url_template
        selectors = list(resource.selectors)

        while True:
            self.console.print(f"[bold]{escape(url)}[/bold] ({len(selectors)} selectors)")
            action = Prompt.ask(
                "Resource action",
                choices=RESOURCE_ACTIONS,
                default="back",
                console=self.console,
            )

            if action == "back":
                return ResourceSpec(url_template=url, selectors=selectors)

            if action == "url":
                url = self.builder.ask_url()
                continue

            if action == "add":
                selector = self.builder.ask_selector()
                name = self.builder.ask_name({s.name for s in selectors})
                selectors.append(SelectorSpec(name=name, selector=selector))
                continue

            index = self._choose("Selector", [f"{s.name}: {s.selector}" for s in selectors])
            if index is None:
                continue
            current = selectors[index]

            if action == "rename":
                taken = {s.name for s in selectors} - {current.name}
                selectors[index] = dataclasses.replace(current, name=self.builder.ask_name(taken))
            elif action == "path":
                selectors[index] = dataclasses.replace(current, selector=self.builder.ask_selector())
            elif Confirm.ask(f"Delete selector {current.name!r}?", default=False, console=self.console):
                del selectors[index]

    def edit(self, config: Configuration) -> Configuration:
        resources = list(config.resources)

        while True:
            self.console.print(f"[bold]{len(resources)} resources[/bold]")
            action = Prompt.ask(
                "Action",
                choices=CONFIG_ACTIONS,
                default="done",
                console=self.console,
            )

            if action == "done":
                return dataclasses.replace(config, resources=resources)

            if action == "add":
                url = self.builder.ask_url()
                resources.append(ResourceSpec(url_template=url, selectors=self.builder.ask_selectors()))
                continue

            index = self._choose("Resource", [r.url_template for r in resources])
            if index is None:
                continue

            if action == "edit":
                resources[index] = self.edit_resource(resources[index])
            elif Confirm.ask(
                f"Delete resource {resources[index].url_template!r}?",
                default=False,
                console=self.console,
            ):
                del resources[index]


def edit_config(
    path: Union[str, Path],
    console: Optional[Console] = None,
) -> Optional[Path]:
    """
    Interactively edit a config file and save it in place.

    Environment variable references are written back with their
    substituted values.

    Args:
        path: Existing .toml or .json config file
        console: Rich console for prompts

    Returns:
        Path written, or None if nothing changed or the user discarded
        the changes

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    loader = ConfigLoader()
    fmt = detect_format(path)
    config = loader.load(path)

    editor = ConfigEditor(console)
    edited = editor.edit(config)

    if edited == config:
        editor.console.print("No changes.")
        return None

    if not Confirm.ask("Save changes?", default=True, console=editor.console):
        editor.console.print("Changes discarded.")
        logger.info("config_not_saved", file=str(path))
        return None

    saved = loader.save(edited, path, fmt)
    editor.console.print("Config file saved!")
    return saved
