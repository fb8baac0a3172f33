"""Plain-text report building for summaries and results."""

from __future__ import annotations

import math

from prettytable import PrettyTable, TableStyle

__all__ = [
    "RULE_WIDTH",
    "attach_format",
    "fmt_number",
    "footer",
    "key_value",
    "render",
    "render_table",
    "rule",
    "section",
    "title_block",
]

RULE_WIDTH = 78


def rule(char="=", width=RULE_WIDTH):
    return char * width


def title_block(title, subtitle=None):
    """Heading lines framed by thick rules."""
    body = [f" {title}"] if subtitle is None else [f" {title}", f" {subtitle}"]
    return [rule(), *body, rule()]


def section(label):
    return ["", rule("-"), f" {label}", rule("-")]


def footer(note=None):
    return [rule()] if note is None else [rule(), f" {note}"]


def key_value(key, value, indent=1):
    return f"{' ' * indent}{key}: {value}"


def fmt_number(value, digits=4, missing="NA"):
    """Format a number for display; ``None`` and NaN become ``missing``."""
    if value is None:
        return missing
    if isinstance(value, int):
        return str(value)
    value = float(value)
    if math.isnan(value):
        return missing
    return f"{value:.{digits}f}"


def render_table(headers, rows, left=()):
    """Box-drawn table; columns named in ``left`` are left-aligned, the rest right."""
    table = PrettyTable(field_names=list(headers))
    table.set_style(TableStyle.SINGLE_BORDER)
    table.add_rows(rows)
    for name in headers:
        table.align[name] = "l" if name in left else "r"
    return table.get_string().splitlines()


def render(lines):
    """Join report lines, stretching every rule to the widest line."""
    width = max([RULE_WIDTH, *(len(line) for line in lines)])
    out = []
    for line in lines:
        if line and set(line) in ({"="}, {"-"}):
            line = line[0] * width
        out.append(line)
    return "\n".join(out)


def attach_format(result_class, format_func):
    """Install ``format_func`` as ``__repr__`` and ``__str__`` of ``result_class``."""
    result_class.__repr__ = format_func
    result_class.__str__ = format_func
