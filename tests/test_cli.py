"""Tests for the minigit CLI."""

import json
import sys

import pytest

from minigit.cli import main


def _run(runner, *args):
    result = runner.invoke(main, list(args))
    assert result.exit_code == 0, result.output
    return result


@pytest.fixture
def committed_repo(initialized_repo, runner, work_tree):
    """a.txt = 'hello' committed as 'first' on master, plus branch 'feature'."""
    (work_tree / "a.txt").write_text("hello\n")
    _run(runner, "add", "-C", initialized_repo, "a.txt")
    _run(runner, "commit", "-C", initialized_repo, "-m", "first")
    _run(runner, "branch", "-C", initialized_repo, "feature")
    return initialized_repo


def _head_hash(runner, repo):
    result = _run(runner, "log", "-C", repo, "--format", "json")
    return json.loads(result.output)[0]["hash"]


# ---------------------------------------------------------------------------
# TestInit
# ---------------------------------------------------------------------------

class TestInit:
    def test_creates_repo(self, runner, work_tree):
        result = runner.invoke(main, ["init", "-C", str(work_tree)])
        assert result.exit_code == 0, result.output
        assert (work_tree / ".minigit" / "HEAD").read_text() == "ref: refs/master\n"

    def test_custom_branch(self, runner, work_tree):
        _run(runner, "init", "-C", str(work_tree), "--branch", "trunk")
        result = _run(runner, "status", "-C", str(work_tree))
        assert "On branch trunk" in result.output

    def test_already_exists_error(self, runner, initialized_repo):
        result = runner.invoke(main, ["init", "-C", initialized_repo])
        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_force_recreates(self, runner, committed_repo):
        _run(runner, "init", "-C", committed_repo, "--force")
        result = _run(runner, "log", "-C", committed_repo)
        assert "No commits yet." in result.output

    def test_env_var(self, runner, work_tree, monkeypatch):
        monkeypatch.setenv("MINIGIT_WORK_TREE", str(work_tree))
        _run(runner, "init")
        assert (work_tree / ".minigit" / "HEAD").exists()

    def test_missing_repo(self, runner, work_tree):
        result = runner.invoke(main, ["status", "-C", str(work_tree)])
        assert result.exit_code != 0
        assert "minigit init" in result.output


# ---------------------------------------------------------------------------
# TestAddCommit
# ---------------------------------------------------------------------------

class TestAddCommit:
    def test_add_and_status(self, runner, initialized_repo, work_tree):
        (work_tree / "a.txt").write_text("a")
        result = _run(runner, "add", "-C", initialized_repo, "a.txt")
        assert "Staged: a.txt" in result.output
        result = _run(runner, "status", "-C", initialized_repo)
        assert "a.txt" in result.output

    def test_add_twice(self, runner, initialized_repo, work_tree):
        (work_tree / "a.txt").write_text("a")
        _run(runner, "add", "-C", initialized_repo, "a.txt")
        result = _run(runner, "add", "-C", initialized_repo, "a.txt")
        assert "already staged" in result.output

    def test_add_missing(self, runner, initialized_repo):
        result = runner.invoke(main, ["add", "-C", initialized_repo, "nope.txt"])
        assert result.exit_code != 0
        assert "not found" in result.output.lower()

    def test_commit_nothing(self, runner, initialized_repo):
        result = runner.invoke(main, ["commit", "-C", initialized_repo, "-m", "x"])
        assert result.exit_code != 0
        assert "Nothing to commit" in result.output

    def test_commit_prints_hash(self, runner, initialized_repo, work_tree):
        (work_tree / "a.txt").write_text("a")
        _run(runner, "add", "-C", initialized_repo, "a.txt")
        result = _run(runner, "commit", "-C", initialized_repo, "-m", "first")
        assert "Committed with hash:" in result.output

    def test_commit_positional_message(self, runner, initialized_repo, work_tree):
        (work_tree / "a.txt").write_text("a")
        _run(runner, "add", "-C", initialized_repo, "a.txt")
        _run(runner, "commit", "-C", initialized_repo, "first")
        result = _run(runner, "log", "-C", initialized_repo, "--format", "json")
        assert json.loads(result.output)[0]["message"] == "first"

    def test_commit_message_required(self, runner, initialized_repo, work_tree):
        (work_tree / "a.txt").write_text("a")
        _run(runner, "add", "-C", initialized_repo, "a.txt")
        result = runner.invoke(main, ["commit", "-C", initialized_repo])
        assert result.exit_code != 0
        assert "Missing commit message" in result.output

    def test_commit_message_twice(self, runner, initialized_repo, work_tree):
        (work_tree / "a.txt").write_text("a")
        _run(runner, "add", "-C", initialized_repo, "a.txt")
        result = runner.invoke(main, ["commit", "-C", initialized_repo, "-m", "x", "y"])
        assert result.exit_code != 0
        assert "not both" in result.output


# ---------------------------------------------------------------------------
# TestLog
# ---------------------------------------------------------------------------

class TestLog:
    def test_no_commits(self, runner, initialized_repo):
        result = _run(runner, "log", "-C", initialized_repo)
        assert "No commits yet." in result.output

    def test_text(self, runner, committed_repo):
        result = _run(runner, "log", "-C", committed_repo)
        assert "first" in result.output

    def test_json(self, runner, committed_repo):
        result = _run(runner, "log", "-C", committed_repo, "--format", "json")
        data = json.loads(result.output)
        assert len(data) == 1
        assert data[0]["message"] == "first"
        assert data[0]["parent"] is None
        assert data[0]["files"] == ["a.txt"]

    def test_jsonl(self, runner, committed_repo):
        result = _run(runner, "log", "-C", committed_repo, "--format", "jsonl")
        lines = result.output.strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["message"] == "first"

    def test_corrupt_history_reported(self, runner, committed_repo, work_tree):
        (work_tree / "a.txt").write_text("second\n")
        _run(runner, "add", "-C", committed_repo, "a.txt")
        _run(runner, "commit", "-C", committed_repo, "-m", "second")
        first = _run(runner, "log", "-C", committed_repo, "--format", "json")
        first_hash = json.loads(first.output)[1]["hash"]
        (work_tree / ".minigit" / "commits" / first_hash).unlink()
        result = runner.invoke(main, ["log", "-C", committed_repo])
        assert result.exit_code != 0
        assert "second" in result.output
        assert first_hash in result.output


# ---------------------------------------------------------------------------
# TestBranchCheckout
# ---------------------------------------------------------------------------

class TestBranchCheckout:
    def test_branch_before_commit(self, runner, initialized_repo):
        result = runner.invoke(main, ["branch", "-C", initialized_repo, "feature"])
        assert result.exit_code != 0
        assert "No commits" in result.output

    def test_list(self, runner, committed_repo):
        result = _run(runner, "branch", "-C", committed_repo)
        assert result.output.splitlines() == ["  feature", "* master"]

    def test_delete(self, runner, committed_repo):
        _run(runner, "branch", "-C", committed_repo, "--delete", "feature")
        result = _run(runner, "branch", "-C", committed_repo)
        assert "feature" not in result.output

    def test_checkout_restores(self, runner, committed_repo, work_tree):
        (work_tree / "a.txt").write_text("world\n")
        _run(runner, "add", "-C", committed_repo, "a.txt")
        _run(runner, "commit", "-C", committed_repo, "-m", "second")
        result = _run(runner, "checkout", "-C", committed_repo, "feature")
        assert "Switched to branch: feature" in result.output
        assert (work_tree / "a.txt").read_text() == "hello\n"
        assert "On branch feature" in _run(runner, "status", "-C", committed_repo).output

    def test_checkout_unknown(self, runner, committed_repo):
        result = runner.invoke(main, ["checkout", "-C", committed_repo, "nope"])
        assert result.exit_code != 0
        assert "Branch not found: nope" in result.output

    def test_checkout_detached(self, runner, committed_repo):
        head = _head_hash(runner, committed_repo)
        result = _run(runner, "checkout", "-C", committed_repo, head[:8])
        assert "detached" in result.output
        assert "HEAD detached" in _run(runner, "status", "-C", committed_repo).output

    def test_reflog(self, runner, committed_repo):
        result = _run(runner, "reflog", "-C", committed_repo, "--format", "json")
        data = json.loads(result.output)
        assert [e["message"] for e in data] == ["commit: first"]

    def test_reflog_feature(self, runner, committed_repo):
        result = _run(runner, "reflog", "-C", committed_repo, "-b", "feature")
        assert "branch: Created from first" in result.output


# ---------------------------------------------------------------------------
# TestMergeDiff
# ---------------------------------------------------------------------------

class TestMergeDiff:
    def test_merge_conflict(self, runner, committed_repo, work_tree):
        result = _run(runner, "merge", "-C", committed_repo, "feature")
        assert "CONFLICT: both modified a.txt" in result.output
        assert (work_tree / "a.txt.conflict").exists()

    def test_merge_clean(self, runner, committed_repo, work_tree):
        _run(runner, "checkout", "-C", committed_repo, "feature")
        (work_tree / "b.txt").write_text("bee\n")
        _run(runner, "add", "-C", committed_repo, "b.txt")
        _run(runner, "commit", "-C", committed_repo, "-m", "add b")
        _run(runner, "checkout", "-C", committed_repo, "master")
        (work_tree / "b.txt").unlink()
        result = _run(runner, "merge", "-C", committed_repo, "feature")
        assert "Merged: b.txt" in result.output
        assert (work_tree / "b.txt").read_text() == "bee\n"

    def test_merge_unknown(self, runner, committed_repo):
        result = runner.invoke(main, ["merge", "-C", committed_repo, "nope"])
        assert result.exit_code != 0
        assert "Branch not found" in result.output

    def test_diff(self, runner, committed_repo, work_tree):
        first = _head_hash(runner, committed_repo)
        (work_tree / "a.txt").write_text("hello\nagain\n")
        _run(runner, "add", "-C", committed_repo, "a.txt")
        _run(runner, "commit", "-C", committed_repo, "-m", "second")
        second = _head_hash(runner, committed_repo)
        result = _run(runner, "diff", "-C", committed_repo, first, second)
        assert result.output.splitlines() == ["=== File: a.txt ===", "+ again"]

    def test_diff_same_commit(self, runner, committed_repo):
        head = _head_hash(runner, committed_repo)
        result = _run(runner, "diff", "-C", committed_repo, head, head)
        assert result.output == ""

    def test_diff_invalid(self, runner, committed_repo):
        head = _head_hash(runner, committed_repo)
        result = runner.invoke(main, ["diff", "-C", committed_repo, head, "0" * 40])
        assert result.exit_code != 0
        assert "Invalid commit" in result.output


class TestVerbose:
    def test_verbose_status(self, runner, committed_repo):
        result = runner.invoke(main, ["-v", "checkout", "-C", committed_repo, "feature"])
        assert result.exit_code == 0, result.output
        assert "Restored: a.txt" in result.output


class TestEntryPoint:
    @pytest.fixture
    def uncached_cli(self, monkeypatch):
        """Drop the imported CLI modules so the entry point re-imports them."""
        import minigit
        for name in [m for m in sys.modules if m == "minigit.cli" or m.startswith("minigit.cli.")]:
            monkeypatch.delitem(sys.modules, name)
        monkeypatch.delattr(minigit, "cli", raising=False)

    def test_missing_click_prints_hint(self, monkeypatch, capsys, uncached_cli):
        from minigit._cli_entry import main as entry_main
        monkeypatch.setitem(sys.modules, "click", None)
        with pytest.raises(SystemExit) as exc_info:
            entry_main()
        assert exc_info.value.code == 1
        assert "pip install 'minigit[cli]'" in capsys.readouterr().err

    def test_other_import_errors_propagate(self, monkeypatch, uncached_cli):
        from minigit._cli_entry import main as entry_main
        monkeypatch.setitem(sys.modules, "minigit.cli._merge", None)
        with pytest.raises(ModuleNotFoundError):
            entry_main()

    def test_runs_cli(self, monkeypatch, capsys):
        from minigit._cli_entry import main as entry_main
        monkeypatch.setattr(sys, "argv", ["minigit", "--help"])
        with pytest.raises(SystemExit) as exc_info:
            entry_main()
        assert exc_info.value.code == 0
        assert "Usage: minigit" in capsys.readouterr().out
