#!/usr/bin/env python3
"""
aidss - AI Decision Support System

Watches a directory tree where every directory is a conversation node.
Saving a node's prompt.txt sends the conversation from the root down to
that node to the model and writes the reply (and any declared output
files) back to disk.

Usage:
    aidss watch -p decisions/ -m gpt-4
    aidss process decisions/option_a_1234
    aidss branch decisions/ "option b"
    aidss summarize decisions/option_a_1234
    aidss adapters
"""

import sys
import time
from typing import Optional

import click
from rich.table import Table

from . import __version__
from .adapters import AdapterBase, AdapterConfig, adapter_for_model, adapter_models, get_adapter
from .core.config import get_default_adapter, get_default_model, load_config
from .core.exceptions import AidssError, ExitCode
from .core.logging import setup_logging
from .core.node import NodeProcessor, create_node, summarize_node
from .utils.output import console, handle_error, print_json, print_success, print_warning
from .watcher import NodeEventHandler, start_watching


def _make_adapter(adapter: Optional[str], model: Optional[str]) -> AdapterBase:
    """Resolve adapter/model from options, falling back to .aidss.yaml."""
    model = model or get_default_model()
    if adapter is None:
        try:
            adapter = adapter_for_model(model)
        except ValueError:
            adapter = get_default_adapter()
    try:
        return get_adapter(adapter, config=AdapterConfig(model=model))
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--adapter/--model")


def _backend_options(f):
    f = click.option("--model", "-m", default=None, help="Model to use (default from .aidss.yaml)")(f)
    f = click.option("--adapter", "-a", default=None, help="Adapter (openai, mock)")(f)
    return f


@click.group()
@click.version_option(version=__version__, prog_name="aidss")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v, -vv, -vvv)")
@click.option("-q", "--quiet", is_flag=True, help="Suppress output except errors")
@click.option("--json-errors", is_flag=True, help="Output errors as JSON")
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: bool, json_errors: bool) -> None:
    """aidss - AI Decision Support System

    \b
    Commands:
      watch      Process nodes as their prompt.txt changes
      process    Process one node now
      branch     Create a child node
      summarize  Summarize the conversation down to a node
      adapters   List adapters and models
    """
    ctx.ensure_object(dict)
    ctx.obj["verbosity"] = verbose
    ctx.obj["json_errors"] = json_errors
    setup_logging(verbose, quiet)


@cli.command("watch")
@click.option("--path", "-p", "watch_path", default=".", type=click.Path(exists=True, file_okay=False),
              help="Path to watch")
@_backend_options
@click.option("--polling", is_flag=True, help="Use a polling observer")
@click.option("--debounce", type=float, default=None, help="Seconds between events for one file")
def watch(watch_path: str, adapter: Optional[str], model: Optional[str],
          polling: bool, debounce: Optional[float]) -> None:
    """Watch a tree and process nodes whose prompt document changes."""
    config = load_config()
    processor = NodeProcessor.from_config(_make_adapter(adapter, model), watch_path, config)
    handler = NodeEventHandler(
        processor,
        debounce=config.watch.debounce if debounce is None else debounce,
    )
    observer = start_watching(
        processor.root, handler,
        polling=polling or config.watch.polling,
    )
    console.print(f"Watching {processor.root} with {processor.adapter.name}/{processor.adapter.config.model}")
    try:
        while observer.is_alive():
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        observer.stop()
        observer.join()


@cli.command("process")
@click.argument("node", type=click.Path(exists=True, file_okay=False))
@click.option("--root", "-r", default=".", type=click.Path(exists=True, file_okay=False),
              help="Tree root (the watched path)")
@_backend_options
@click.option("--strict", is_flag=True, help="Exit non-zero on extraction warnings")
@click.option("--json", "json_output", is_flag=True, help="JSON output")
@click.pass_context
def process(ctx: click.Context, node: str, root: str, adapter: Optional[str],
            model: Optional[str], strict: bool, json_output: bool) -> None:
    """Process NODE once and report what was written."""
    processor = NodeProcessor.from_config(_make_adapter(adapter, model), root, load_config())
    try:
        result = processor.process(node)
    except (AidssError, OSError) as e:
        sys.exit(handle_error(e, ctx.obj["json_errors"], {"node": node, "root": root}))

    report = result.report
    if json_output:
        print_json(result.metrics())
    else:
        print_success(f"Reply written to {result.response_path}")
        for path in report.written:
            print_success(f"Updated {path}")
        for warning in report.warnings:
            print_warning(str(warning))
        for name, error in report.failed.items():
            print_warning(f"Failed to write {name}: {error}")

    if report.failed or (strict and not report.ok):
        sys.exit(ExitCode.EXTRACTION_INCOMPLETE)


@cli.command("branch")
@click.argument("parent", type=click.Path(exists=True, file_okay=False))
@click.argument("descriptor")
def branch(parent: str, descriptor: str) -> None:
    """Create a child node of PARENT named after DESCRIPTOR."""
    path = create_node(parent, descriptor)
    click.echo(str(path))


@cli.command("summarize")
@click.argument("node", type=click.Path(exists=True, file_okay=False))
@click.option("--root", "-r", default=".", type=click.Path(exists=True, file_okay=False),
              help="Tree root (the watched path)")
@_backend_options
@click.pass_context
def summarize(ctx: click.Context, node: str, root: str,
              adapter: Optional[str], model: Optional[str]) -> None:
    """Summarize the conversation from the root down to NODE."""
    config = load_config()
    try:
        path = summarize_node(
            node, root, _make_adapter(adapter, model),
            prompt_name=config.files.prompt, response_name=config.files.response,
        )
    except (AidssError, OSError) as e:
        sys.exit(handle_error(e, ctx.obj["json_errors"], {"node": node}))
    print_success(f"Summary written to {path}")


@cli.command("adapters")
@click.option("--json", "json_output", is_flag=True, help="JSON output")
def adapters(json_output: bool) -> None:
    """List available adapters and their models."""
    models = adapter_models()
    if json_output:
        print_json(models)
        return

    table = Table(title="Adapters")
    table.add_column("Adapter")
    table.add_column("Models")
    for name, names in models.items():
        table.add_row(name, ", ".join(names))
    console.print(table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
