"""Shared fixtures for minigit tests."""

import pytest
from click.testing import CliRunner

from minigit import Repository
from minigit.cli import main


@pytest.fixture
def work_tree(tmp_path):
    """An empty work tree directory."""
    p = tmp_path / "wt"
    p.mkdir()
    return p


@pytest.fixture
def repo(work_tree):
    """A disk-backed repository with no commits."""
    return Repository.init(work_tree)


@pytest.fixture
def mem_repo():
    """An in-memory repository with two files in the work tree."""
    return Repository.in_memory({"a.txt": b"alpha\n", "b.txt": b"beta\n"})


@pytest.fixture
def repo_with_history(repo, work_tree):
    """Disk repo with two commits on master: a.txt, then a.txt + b.txt."""
    (work_tree / "a.txt").write_bytes(b"one\n")
    repo.add("a.txt")
    first = repo.commit("first")
    (work_tree / "a.txt").write_bytes(b"one\ntwo\n")
    (work_tree / "b.txt").write_bytes(b"bee\n")
    repo.add("a.txt")
    repo.add("b.txt")
    second = repo.commit("second")
    return repo, first, second


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def initialized_repo(work_tree, runner):
    """Initialize a repo via the CLI and return the work tree path."""
    p = str(work_tree)
    result = runner.invoke(main, ["init", "-C", p])
    assert result.exit_code == 0, result.output
    return p
