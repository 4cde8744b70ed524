"""
Rendering of result items as rich tables or JSON.

Failed items are never dropped: they are rendered with an
"ERROR: ..." marker in place of the value.
"""

import json
from collections.abc import Sequence
from itertools import groupby

from rich.table import Table
from rich.text import Text

from .core.models import ResultItem


def build_table(items: Sequence[ResultItem], title: str = "") -> Table:
    """Two-column Name / Value table for one group of items."""
    table = Table(title=title or None)
    table.add_column("Name", style="cyan")
    table.add_column("Value")

    for item in items:
        style = "green" if item.ok else "red"
        # Text() keeps values like "[b]" from being read as rich markup
        table.add_row(Text(item.name), Text(item.display, style=style))

    return table


def build_tables(items: Sequence[ResultItem]) -> list[Table]:
    """
    One table per resolved resource, titled with its URL.

    Items must already be in batch order.
    """
    tables = []
    for (_, _, url), group in groupby(
        items, key=lambda item: (item.source_index, item.param_index, item.url)
    ):
        tables.append(build_table(list(group), title=url))
    return tables


def to_json(items: Sequence[ResultItem], indent: int = 2) -> str:
    """JSON array of {"name", "value"} objects in batch order."""
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False, indent=indent)
