"""Basic commands: init, add, commit, status, log."""

from __future__ import annotations

import json
import os
import shutil

import click

from ..exceptions import CorruptHistoryError
from ..index import StageResult
from ..refs import DetachedHead
from ..repo import REPO_DIR, Repository
from ._helpers import (
    main,
    _work_tree_option,
    _require_work_tree,
    _open_repo,
    _errors,
    _format_option,
    _commit_dict,
    _status,
)


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@main.command()
@_work_tree_option
@click.option("--branch", "-b", default="master", help="Initial branch name (default: master).")
@click.option("-f", "--force", is_flag=True, help="Destroy existing repository and recreate.")
@click.pass_context
def init(ctx, branch, force):
    """Create a new repository in the work tree."""
    work_tree = _require_work_tree(ctx)
    repo_path = os.path.join(work_tree, REPO_DIR)
    if force and os.path.exists(repo_path):
        shutil.rmtree(repo_path)
    elif os.path.exists(os.path.join(repo_path, "HEAD")):
        raise click.ClickException(f"Repository already exists: {repo_path}")
    with _errors():
        Repository.init(work_tree, branch=branch)
    click.echo(f"Initialized empty repository in {repo_path} (branch {branch})")


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------

@main.command()
@_work_tree_option
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def add(ctx, paths):
    """Stage PATHS for the next commit."""
    repo = _open_repo(ctx)
    for path in paths:
        with _errors():
            result = repo.add(path)
        if result == StageResult.ALREADY_STAGED:
            click.echo(f"{path} is already staged.")
        else:
            click.echo(f"Staged: {path}")


# ---------------------------------------------------------------------------
# commit
# ---------------------------------------------------------------------------

@main.command()
@_work_tree_option
@click.argument("message_arg", metavar="[MESSAGE]", required=False)
@click.option("-m", "--message", default=None, help="Commit message (or pass it as MESSAGE).")
@click.pass_context
def commit(ctx, message_arg, message):
    """Commit the staged paths with MESSAGE."""
    if message is not None and message_arg is not None:
        raise click.ClickException("Give the message either as MESSAGE or with -m, not both")
    message = message if message is not None else message_arg
    if message is None:
        raise click.ClickException("Missing commit message (MESSAGE or -m)")
    repo = _open_repo(ctx)
    with _errors():
        new = repo.commit(message)
    click.echo(f"Committed with hash: {new.hash}")
    _status(ctx, f"{len(new.snapshot)} file(s) in snapshot")


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------

@main.command()
@_work_tree_option
@click.pass_context
def status(ctx):
    """Show HEAD and the staged paths."""
    repo = _open_repo(ctx)
    head = repo.head
    if isinstance(head, DetachedHead):
        click.echo(f"HEAD detached at {head.commit_hash[:7]}")
    else:
        click.echo(f"On branch {head.branch}")
    staged = repo.status()
    if not staged:
        click.echo("Nothing staged.")
        return
    click.echo("Staged:")
    for path in staged:
        click.echo(f"  {path}")


# ---------------------------------------------------------------------------
# log
# ---------------------------------------------------------------------------

@main.command()
@_work_tree_option
@_format_option
@click.option("-n", "--max-count", type=int, default=None, help="Show at most N commits.")
@click.pass_context
def log(ctx, fmt, max_count):
    """Show commit history from HEAD, newest first."""
    repo = _open_repo(ctx)
    entries = []
    error = None
    try:
        for entry in repo.log():
            entries.append(entry)
            if max_count is not None and len(entries) >= max_count:
                break
    except CorruptHistoryError as exc:
        error = exc

    if not entries and error is None:
        if fmt == "json":
            click.echo("[]")
        elif fmt == "text":
            click.echo("No commits yet.")
    elif fmt == "json":
        click.echo(json.dumps([_commit_dict(e) for e in entries], indent=2))
    elif fmt == "jsonl":
        for entry in entries:
            click.echo(json.dumps(_commit_dict(entry)))
    else:
        for entry in entries:
            click.echo(f"{entry.hash[:7]}  {entry.time.isoformat()}  {entry.message}")

    if error is not None:
        raise click.ClickException(str(error))
