"""Branch commands: branch, checkout, reflog."""

from __future__ import annotations

import json
from datetime import datetime

import click

from ._helpers import (
    main,
    _work_tree_option,
    _open_repo,
    _errors,
    _format_option,
    _status,
)


# ---------------------------------------------------------------------------
# branch
# ---------------------------------------------------------------------------

@main.command()
@_work_tree_option
@click.argument("name", required=False)
@click.option("--at", "at", default=None, help="Commit hash (or prefix) to branch from.")
@click.option("-d", "--delete", is_flag=True, help="Delete branch NAME.")
@click.pass_context
def branch(ctx, name, at, delete):
    """List branches, or create (or delete) branch NAME."""
    repo = _open_repo(ctx)
    if name is None:
        if delete or at:
            raise click.ClickException("Branch name required")
        current = repo.refs.current_branch()
        for b in repo.refs.branches():
            marker = "*" if b == current else " "
            click.echo(f"{marker} {b}")
        return
    if delete:
        with _errors():
            repo.refs.delete_branch(name)
        _status(ctx, f"Deleted branch {name}")
        return
    with _errors():
        target = repo.branch(name, at)
    click.echo(f"Created branch '{name}' pointing to {target}")


# ---------------------------------------------------------------------------
# checkout
# ---------------------------------------------------------------------------

@main.command()
@_work_tree_option
@click.argument("name")
@click.pass_context
def checkout(ctx, name):
    """Restore the snapshot of branch (or commit) NAME and move HEAD to it.

    Local changes to files in that snapshot are overwritten.
    """
    repo = _open_repo(ctx)
    with _errors():
        result = repo.checkout(name)
    for path in result.restored:
        _status(ctx, f"Restored: {path}")
    for path in result.skipped:
        click.echo(f"Warning: no recorded content for {path}", err=True)
    if result.detached:
        click.echo(f"HEAD is now at {result.commit_hash[:7]} (detached)")
    else:
        click.echo(f"Switched to branch: {name}")


# ---------------------------------------------------------------------------
# reflog
# ---------------------------------------------------------------------------

def _reflog_entry_dict(entry) -> dict:
    return {
        "old_sha": entry.old_sha,
        "new_sha": entry.new_sha,
        "committer": entry.committer,
        "timestamp": entry.timestamp,
        "message": entry.message,
    }


@main.command()
@_work_tree_option
@click.option("-b", "--branch", "branch_name", default=None,
              help="Branch to show (default: the checked-out branch).")
@click.option("-n", "--limit", type=int, default=None, help="Show only the last N entries.")
@_format_option
@click.pass_context
def reflog(ctx, branch_name, limit, fmt):
    """Show where a branch has pointed over time."""
    repo = _open_repo(ctx)
    with _errors():
        entries = repo.reflog(branch_name)
    if limit:
        entries = entries[-limit:]

    if fmt == "json":
        click.echo(json.dumps([_reflog_entry_dict(e) for e in entries], indent=2))
    elif fmt == "jsonl":
        for entry in entries:
            click.echo(json.dumps(_reflog_entry_dict(entry)))
    elif not entries:
        click.echo("No reflog entries")
    else:
        for i, entry in enumerate(entries):
            time_str = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S")
            click.echo(f"[{i}] {entry.new_sha[:7]} ({time_str}) {entry.message}")
