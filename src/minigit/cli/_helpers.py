"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import logging
from contextlib import contextmanager

import click

from ..exceptions import MinigitError
from ..repo import Repository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _store_work_tree(ctx, param, value):
    """Click callback: store --work-tree value in the context."""
    ctx.ensure_object(dict)
    if value is not None:
        ctx.obj["work_tree"] = value
    return value


def _work_tree_option(f):
    """Shared -C/--work-tree option decorator for all commands."""
    return click.option(
        "--work-tree", "-C", type=click.Path(file_okay=False), envvar="MINIGIT_WORK_TREE",
        help="Directory holding the work tree and its .minigit (or set MINIGIT_WORK_TREE).",
        expose_value=False, callback=_store_work_tree, is_eager=True,
    )(f)


def _require_work_tree(ctx) -> str:
    return ctx.obj.get("work_tree") or "."


def _open_repo(ctx) -> Repository:
    try:
        return Repository.open(_require_work_tree(ctx))
    except FileNotFoundError as exc:
        raise click.ClickException(f"{exc} (run 'minigit init' first)")


@contextmanager
def _errors():
    """Turn library errors into ClickException messages."""
    try:
        yield
    except click.ClickException:
        raise
    except MinigitError as exc:
        raise click.ClickException(str(exc))
    except FileNotFoundError as exc:
        raise click.ClickException(f"File not found: {exc.filename or exc}")
    except (OSError, ValueError) as exc:
        raise click.ClickException(str(exc))


def _format_option(f):
    """Shared --format option for log-style output."""
    return click.option(
        "--format", "fmt", type=click.Choice(["text", "json", "jsonl"]),
        default="text", show_default=True, help="Output format.",
    )(f)


def _commit_dict(commit) -> dict:
    return {
        "hash": commit.hash,
        "message": commit.message,
        "time": commit.time.isoformat(),
        "parent": commit.parent_hash or None,
        "files": commit.snapshot_paths,
    }


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--work-tree", "-C", type=click.Path(file_okay=False), envvar="MINIGIT_WORK_TREE",
              help="Directory holding the work tree and its .minigit (or set MINIGIT_WORK_TREE).",
              expose_value=False, callback=_store_work_tree, is_eager=True)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, verbose):
    """minigit: a small local version-control engine.

    Tracks snapshots of a flat list of files in the current directory
    (or -C DIR), with branches, checkout, merge, and diff.

    \b
    Quick start:
      minigit init
      minigit add notes.txt
      minigit commit -m "first"
      minigit branch feature
      minigit log
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
