"""CLI entrypoint for kube-quantity."""

import json
from functools import reduce
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from pathlib import Path
from typing import Any

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kquant.config import load_config
from kquant.domain.cpu import CPUQuantity
from kquant.domain.memory import MemoryQuantity
from kquant.domain.quantity import Quantity
from kquant.domain.resource_totals import (
    NamespaceTotals,
    ResourceReport,
    is_system_namespace,
    summarize_pod_resources,
)
from kquant.infrastructure.kubectl_client import kubectl_json
from kquant.logging import LOG, setup_logging

app = typer.Typer(
    name="kquant",
    help="Kubernetes CPU and memory quantity toolkit",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
cpu_app = typer.Typer(
    help="CPU arithmetic in cores and millicores.", no_args_is_help=True
)
memory_app = typer.Typer(
    help="Memory arithmetic in bytes and binary (Ki/Mi/Gi/Ti) units.",
    no_args_is_help=True,
)
app.add_typer(cpu_app, name="cpu")
app.add_typer(memory_app, name="memory")
console = Console()


def _resolve_version() -> str:
    """Return installed package version or local fallback."""
    try:
        return package_version("kube-quantity")
    except PackageNotFoundError:
        return "0.1.0"


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log kubectl commands and aggregation details.",
    ),
) -> None:
    """Handle global CLI options."""
    setup_logging(LOG, verbose)
    if version:
        console.print(f"kube-quantity {_resolve_version()}")
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=0)


def _handle_error(exc: Exception) -> None:
    """Convert domain exceptions to CLI exit codes."""
    if isinstance(exc, ValueError):
        console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    if isinstance(exc, RuntimeError):
        console.print(f"[red]ERROR:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc
    raise exc


def _register_arithmetic(group: typer.Typer, quantity_cls: type[Quantity]) -> None:
    """Attach parse/add/subtract/scale/compare commands for one quantity type."""
    unit = quantity_cls.kind.canonical_unit

    @group.command("parse")
    def parse_command(
        text: str = typer.Argument(..., help="Quantity text, e.g. 250m or 1Gi."),
    ) -> None:
        """Show the display form and canonical amount of a quantity."""
        try:
            quantity = quantity_cls.parse(text)
            console.print(f"{quantity.to_text()} ({quantity.to_number()} {unit})")
        except ValueError as exc:
            _handle_error(exc)

    @group.command("add")
    def add_command(
        operands: list[str] = typer.Argument(..., help="Quantities to sum."),
    ) -> None:
        """Sum all operands."""
        try:
            quantities = [quantity_cls.parse(text) for text in operands]
            console.print(reduce(lambda a, b: a.add(b), quantities).to_text())
        except ValueError as exc:
            _handle_error(exc)

    @group.command("subtract")
    def subtract_command(
        operands: list[str] = typer.Argument(
            ..., help="Minuend followed by the quantities to take away."
        ),
    ) -> None:
        """Subtract every following operand from the first one."""
        try:
            quantities = [quantity_cls.parse(text) for text in operands]
            console.print(reduce(lambda a, b: a.subtract(b), quantities).to_text())
        except ValueError as exc:
            _handle_error(exc)

    # Negative factors such as -1 must reach scale() instead of option parsing.
    @group.command("scale", context_settings={"ignore_unknown_options": True})
    def scale_command(
        text: str = typer.Argument(..., help="Quantity to scale."),
        factor: float = typer.Argument(..., help="Multiplication factor."),
    ) -> None:
        """Multiply a quantity, flooring to a whole canonical unit."""
        try:
            console.print(quantity_cls.parse(text).scale(factor).to_text())
        except ValueError as exc:
            _handle_error(exc)

    @group.command("compare")
    def compare_command(
        left: str = typer.Argument(..., help="Left-hand quantity."),
        right: str = typer.Argument(..., help="Right-hand quantity."),
    ) -> None:
        """Print how two quantities order against each other."""
        try:
            a = quantity_cls.parse(left)
            b = quantity_cls.parse(right)
        except ValueError as exc:
            _handle_error(exc)
            return
        if a.less_than(b):
            symbol = "<"
        elif a.greater_than(b):
            symbol = ">"
        else:
            symbol = "="
        console.print(f"{a.to_text()} {symbol} {b.to_text()}")


_register_arithmetic(cpu_app, CPUQuantity)
_register_arithmetic(memory_app, MemoryQuantity)


def _totals_row(totals: NamespaceTotals) -> list[str]:
    return [
        escape(totals.namespace),
        str(totals.pods),
        str(totals.containers),
        totals.cpu_requests.to_text(),
        totals.cpu_limits.to_text(),
        totals.memory_requests.to_text(),
        totals.memory_limits.to_text(),
    ]


def _render_report(report: ResourceReport) -> None:
    """Print per-namespace totals and skipped values as rich tables."""
    table = Table(title="Requests and limits", box=box.SIMPLE_HEAVY)
    for header in ("namespace", "pods", "containers"):
        table.add_column(header, no_wrap=True)
    for header in ("cpu req", "cpu lim", "mem req", "mem lim"):
        table.add_column(header, justify="right", no_wrap=True)

    for namespace in sorted(report.namespaces):
        table.add_row(*_totals_row(report.namespaces[namespace]))
    table.add_section()
    table.add_row(*_totals_row(report.total), style="bold")
    console.print(table)

    if not report.skipped:
        return
    skipped = Table(title="Skipped values", box=box.SIMPLE, title_style="yellow")
    for header in ("namespace", "pod", "container", "resource", "value", "reason"):
        skipped.add_column(header)
    for entry in report.skipped:
        skipped.add_row(
            escape(entry.namespace),
            escape(entry.pod),
            escape(entry.container),
            entry.resource,
            escape(entry.raw),
            entry.reason,
        )
    console.print(skipped)


@app.command("requests")
def requests_command(
    file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Read a `kubectl get pods -o json` payload instead of calling kubectl.",
    ),
    include_system: bool = typer.Option(
        False,
        "--include-system",
        help="Include kube-/rancher-/cattle- namespaces in totals.",
    ),
    namespaces: list[str] | None = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Restrict totals to this namespace (repeatable).",
    ),
) -> None:
    """Sum container CPU and memory requests/limits per namespace."""
    config = load_config()
    selected = frozenset(namespaces or ())
    with_system = include_system or config.include_system or bool(selected)

    def keep(namespace: str) -> bool:
        if selected and namespace not in selected:
            return False
        return not is_system_namespace(
            namespace,
            include_system=with_system,
            extra_namespaces=config.extra_system_namespaces,
        )

    try:
        pods: dict[str, Any]
        if file is not None:
            LOG.debug("Reading pods from %s", file)
            pods = json.loads(file.read_text(encoding="utf-8"))
        else:
            pods = kubectl_json("get pods -A", global_args=config.kubectl_args)
        if not isinstance(pods, dict):
            raise ValueError("pod list JSON must be an object")
        _render_report(summarize_pod_resources(pods, namespace_filter=keep))
    except (ValueError, RuntimeError) as exc:
        _handle_error(exc)


def main() -> None:
    """Project entrypoint for `kquant` script."""
    app()


if __name__ == "__main__":
    main()
