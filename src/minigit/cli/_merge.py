"""Merge and diff commands."""

from __future__ import annotations

import click

from ._helpers import (
    main,
    _work_tree_option,
    _open_repo,
    _errors,
    _status,
)


@main.command()
@_work_tree_option
@click.argument("branch_name", metavar="BRANCH")
@click.pass_context
def merge(ctx, branch_name):
    """Merge BRANCH into the work tree and commit.

    Files BRANCH records that already exist locally are left alone; both
    versions are written to FILE.conflict for manual resolution.
    """
    repo = _open_repo(ctx)
    with _errors():
        result = repo.merge(branch_name)
    for path in result.merged:
        click.echo(f"Merged: {path}")
    for path in result.conflicts:
        click.echo(f"CONFLICT: both modified {path} (see {path}.conflict)")
    for path in result.skipped:
        click.echo(f"Warning: no recorded content for {path}", err=True)
    click.echo(f"Committed with hash: {result.commit.hash}")
    _status(ctx, f"{len(result.merged)} merged, {len(result.conflicts)} conflicted")


@main.command()
@_work_tree_option
@click.argument("hash_a")
@click.argument("hash_b")
@click.pass_context
def diff(ctx, hash_a, hash_b):
    """Show line differences between commits HASH_A and HASH_B."""
    repo = _open_repo(ctx)
    with _errors():
        report = repo.diff(hash_a, hash_b)
    text = report.format()
    if text:
        click.echo(text)
