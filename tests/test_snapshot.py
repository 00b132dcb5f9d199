"""Tests for repoadvisor.snapshot."""

from __future__ import annotations

import os
import threading
from pathlib import Path

import pytest

from repoadvisor.config import ScanConfig
from repoadvisor.errors import AnalysisCancelled
from repoadvisor.snapshot import IgnoreRule, SnapshotBuilder, is_ignored


def test_build_collects_analyzable_files_in_path_order(repo_builder) -> None:
    repo_builder.write(
        {
            "src/server.js": "const express = require('express');\n",
            "src/app.py": "print('hi')\n",
            "package.json": '{"dependencies": {"express": "^4.0.0"}}',
            "README.md": "# Shop\n",
            "assets/logo.png": "not really a png",
        }
    )

    snapshot = repo_builder.snapshot()

    assert snapshot.root == str(repo_builder.path().resolve())
    assert [record.path for record in snapshot.files] == ["package.json", "src/app.py", "src/server.js"]
    record = snapshot.find("src/app.py")
    assert record is not None
    assert record.extension == ".py"
    assert record.size_bytes == len("print('hi')\n")
    assert record.line_count == 1


def test_build_skips_hidden_and_dependency_directories(repo_builder) -> None:
    repo_builder.write(
        {
            "index.js": "console.log('ok')\n",
            "node_modules/lodash/index.js": "module.exports = {}\n",
            ".git/hooks/pre-commit.js": "x\n",
            "vendor/lib.php": "<?php\n",
            "dist/bundle.js": "x\n",
        }
    )

    paths = [record.path for record in repo_builder.snapshot().files]

    assert paths == ["index.js"]


def test_build_honours_gitignore_and_exclude_paths(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    (root / "generated").mkdir(parents=True)
    (root / "src").mkdir()
    (root / ".gitignore").write_text("generated/\n*.min.js\n!keep.min.js\n", encoding="utf-8")
    (root / "generated" / "client.js").write_text("x\n", encoding="utf-8")
    (root / "src" / "app.min.js").write_text("x\n", encoding="utf-8")
    (root / "src" / "keep.min.js").write_text("x\n", encoding="utf-8")
    (root / "src" / "main.js").write_text("x\n", encoding="utf-8")
    (root / "src" / "legacy.js").write_text("x\n", encoding="utf-8")

    builder = SnapshotBuilder(ScanConfig(exclude_paths=["src/legacy.js"]))
    paths = [record.path for record in builder.build(root).files]

    assert paths == ["src/keep.min.js", "src/main.js"]


def test_build_skips_unreadable_and_oversized_files(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    root.mkdir()
    (root / "ok.js").write_text("let a = 1;\n", encoding="utf-8")
    (root / "binary.js").write_bytes(b"\xff\xfe\x00\x81")
    (root / "huge.js").write_text("x" * 200, encoding="utf-8")

    builder = SnapshotBuilder(ScanConfig(max_file_bytes=100))
    paths = [record.path for record in builder.build(root).files]

    assert paths == ["ok.js"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_build_skips_symlinks_leaving_the_root(tmp_path: Path) -> None:
    outside = tmp_path / "outside.js"
    outside.write_text("secret\n", encoding="utf-8")
    root = tmp_path / "repo"
    root.mkdir()
    (root / "inside.js").write_text("x\n", encoding="utf-8")
    try:
        (root / "link.js").symlink_to(outside)
    except OSError:
        pytest.skip("cannot create symlinks here")

    paths = [record.path for record in SnapshotBuilder().build(root).files]

    assert paths == ["inside.js"]


def test_build_rejects_missing_root(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        SnapshotBuilder().build(tmp_path / "missing")


def test_build_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "file.js"
    target.write_text("x\n", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        SnapshotBuilder().build(target)


def test_build_raises_when_cancelled(repo_builder) -> None:
    repo_builder.write({"a.js": "x\n", "b.js": "y\n"})
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(AnalysisCancelled):
        SnapshotBuilder().build(repo_builder.path(), cancel=cancel)


def test_build_is_repeatable(repo_builder) -> None:
    repo_builder.write({"b.js": "b\n", "a/c.py": "c\n", "a.ts": "a\n"})

    assert repo_builder.snapshot() == repo_builder.snapshot()


def test_empty_tree_yields_empty_snapshot(repo_builder) -> None:
    snapshot = repo_builder.snapshot()

    assert snapshot.files == ()
    assert snapshot.total_lines == 0


def test_ignore_rules_follow_gitignore_anchoring() -> None:
    lines = ["# generated", "", "/dist", "docs/*.md", "*.log", "!keep.log", "cache/"]
    rules = [rule for rule in map(IgnoreRule.parse, lines) if rule is not None]

    assert len(rules) == 5
    assert is_ignored("dist", True, rules)
    assert not is_ignored("web/dist", True, rules)
    assert is_ignored("docs/intro.md", False, rules)
    assert not is_ignored("api/docs/intro.md", False, rules)
    assert is_ignored("server/app.log", False, rules)
    assert not is_ignored("server/keep.log", False, rules)
    assert is_ignored("web/cache", True, rules)
    assert not is_ignored("web/cache", False, rules)
