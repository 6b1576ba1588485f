"""End-to-end tests for init, status, commit and log."""

import os

import pytest
import yaml

from treesnap.config import load_config
from treesnap.context import ProjectContext
from treesnap.core import FingerprintStrategy
from treesnap.engine import CommitEngine, init_project
from treesnap.errors import ConfigError, NotInitialized, StoreUnavailable
from treesnap.ignore import DEFAULT_IGNORE
from treesnap.store import SnapshotStore


def committed_paths(root, commit_id):
    with SnapshotStore.open(ProjectContext(root).store_path, read_only=True) as store:
        return store.fingerprints_for(commit_id)


class TestInit:
    """Test project initialization."""

    def test_creates_control_directory_layout(self, tmp_path):
        result = init_project(tmp_path)
        ctx = ProjectContext(tmp_path)

        assert result.created
        assert ctx.storage_dir.is_dir()
        assert ctx.keys_dir.is_dir()
        assert ctx.branch_ref_path.is_file()
        assert ctx.head_path.read_text() == "ref: refs/heads/main\n"
        assert ctx.lock_path.is_file()
        assert ctx.store_path.is_file()
        assert ctx.ignore_path.read_text() == DEFAULT_IGNORE

    def test_config_written(self, tmp_path):
        result = init_project(tmp_path, strategy="hash", project_name="demo")
        config = load_config(ProjectContext(tmp_path))

        assert config == result.config
        assert config.project_name == "demo"
        assert config.fingerprint_strategy == FingerprintStrategy.HASH
        assert config.created_at > 0

    def test_project_name_defaults_to_directory(self, tmp_path):
        root = tmp_path / "my-project"
        root.mkdir()

        assert init_project(root).config.project_name == "my-project"

    def test_existing_ignore_file_kept(self, tmp_path):
        (tmp_path / ".treesnapignore").write_text("custom/\n")

        init_project(tmp_path)

        assert (tmp_path / ".treesnapignore").read_text() == "custom/\n"

    def test_reinit_is_not_destructive(self, tmp_path, write_file):
        init_project(tmp_path)
        write_file("a.txt", "hello")
        engine = CommitEngine(tmp_path)
        first = engine.commit("first")
        (tmp_path / ".treesnapignore").write_text("edited/\n")

        again = init_project(tmp_path, strategy="hash")

        assert not again.created
        assert again.config.fingerprint_strategy == FingerprintStrategy.METADATA
        assert engine.log() == [first.commit]
        assert (tmp_path / ".treesnapignore").read_text() == "edited/\n"

    def test_reinit_repairs_interrupted_init(self, tmp_path, write_file):
        (tmp_path / ".treesnap").mkdir()

        result = init_project(tmp_path, strategy="hash")
        ctx = ProjectContext(tmp_path)

        assert not result.created
        assert result.config.fingerprint_strategy == FingerprintStrategy.HASH
        assert load_config(ctx) == result.config
        assert ctx.store_path.is_file()
        assert ctx.lock_path.is_file()
        assert ctx.head_path.read_text() == "ref: refs/heads/main\n"
        write_file("a.txt")
        assert CommitEngine(tmp_path).commit("after repair").commit.id == 1

    def test_reinit_recreates_missing_store(self, tmp_path):
        first = init_project(tmp_path)
        ProjectContext(tmp_path).store_path.unlink()

        again = init_project(tmp_path)

        assert again.config == first.config
        assert CommitEngine(tmp_path).status().commit_count == 0

    def test_unknown_strategy_rejected(self, tmp_path):
        with pytest.raises(ConfigError):
            init_project(tmp_path, strategy="crc32")
        assert not (tmp_path / ".treesnap").exists()


class TestStatus:
    """Test status classification."""

    def test_cold_start_lists_untracked(self, project, write_file):
        write_file("a.txt", "hello")

        report = CommitEngine(project).status()

        assert "a.txt" in report.diff.untracked
        assert report.diff.modified == []
        assert report.commit_count == 0
        assert report.latest_commit is None

    def test_clean_after_commit(self, engine, write_file):
        write_file("a.txt", "hello")
        write_file("src/main.py", "print()")

        engine.commit("msg")
        report = engine.status()

        assert report.diff.untracked == []
        assert report.diff.modified == []
        assert not report.diff.has_changes
        assert report.commit_count == 1

    def test_status_is_idempotent(self, engine, write_file):
        write_file("a.txt", "hello")
        engine.commit("msg")
        write_file("b.txt", "new")
        write_file("a.txt", "changed!", mtime=2_000_000_000)

        first = engine.status()
        second = engine.status()

        assert first.diff == second.diff
        assert first.diff.untracked == ["b.txt"]
        assert first.diff.modified == ["a.txt"]

    def test_status_never_writes(self, engine, write_file):
        write_file("a.txt")
        engine.status()
        engine.status()

        assert engine.log() == []

    def test_metadata_change_reported_as_modified(self, engine, write_file):
        t = 1_700_000_000
        write_file("data.bin", "x" * 10, mtime=t)
        engine.commit("ten bytes")

        write_file("data.bin", "x" * 12, mtime=t + 5)
        report = engine.status()

        assert report.diff.modified == ["data.bin"]
        assert "data.bin" not in report.diff.untracked

    def test_hash_strategy_ignores_touch(self, hash_project, write_file):
        write_file("a.txt", "same", mtime=1_000)
        engine = CommitEngine(hash_project)
        engine.commit("first")

        os.utime(hash_project / "a.txt", (9_000, 9_000))
        assert not engine.status().diff.has_changes

        write_file("a.txt", "different")
        assert engine.status().diff.modified == ["a.txt"]

    def test_ignored_files_not_reported(self, engine, project, write_file):
        write_file("build/out.o")
        write_file("pkg/build/out.bin")
        write_file("app.log")
        write_file("kept.txt")

        untracked = engine.status().diff.untracked

        assert "kept.txt" in untracked
        assert not any("build" in p or p.endswith(".log") for p in untracked)
        assert not any(p.startswith(".treesnap/") for p in untracked)

    def test_deleted_files_not_a_change(self, engine, project, write_file):
        write_file("a.txt")
        write_file("b.txt")
        engine.commit("both")
        (project / "b.txt").unlink()

        diff = engine.status().diff

        assert not diff.has_changes
        assert diff.deleted == ["b.txt"]

    def test_ignore_edits_apply_immediately(self, engine, project, write_file):
        write_file("notes.md")
        assert "notes.md" in engine.status().diff.untracked

        with (project / ".treesnapignore").open("a") as f:
            f.write("*.md\n")

        assert "notes.md" not in engine.status().diff.untracked


class TestCommit:
    """Test snapshot recording."""

    def test_every_file_recorded_exactly_once(self, engine, project, write_file):
        for name in ["a.txt", "src/b.py", "src/deep/c.json", "build/skip.o"]:
            write_file(name)

        result = engine.commit("snapshot")
        recorded = committed_paths(project, result.commit.id)

        assert set(recorded) == {".treesnapignore", "a.txt", "src/b.py", "src/deep/c.json"}
        assert result.file_count == 4

    def test_snapshot_is_total(self, engine, project, write_file):
        write_file("a.txt")
        write_file("b.txt")
        engine.commit("first")
        (project / "a.txt").unlink()

        second = engine.commit("second")

        assert set(committed_paths(project, second.commit.id)) == {".treesnapignore", "b.txt"}

    def test_undecodable_file_name_skipped(self, engine, project, write_file):
        write_file("a.txt")
        try:
            with open(os.path.join(os.fsencode(project), b"bad\xffname.txt"), "wb") as f:
                f.write(b"data")
        except OSError:
            pytest.skip("filesystem rejects non-UTF-8 names")

        before = engine.status()
        result = engine.commit("msg")
        after = engine.status()

        assert before.diff.untracked == [".treesnapignore", "a.txt"]
        assert set(committed_paths(project, result.commit.id)) == {".treesnapignore", "a.txt"}
        assert not after.diff.has_changes
        assert engine.commit("again").commit.id == result.commit.id + 1

    def test_commit_metadata(self, engine, write_file):
        write_file("a.txt")

        result = engine.commit("hello world", timestamp=1234)

        assert result.commit.message == "hello world"
        assert result.commit.author == "local-user"
        assert result.commit.timestamp == 1234

    def test_empty_message_rejected(self, engine):
        with pytest.raises(ValueError):
            engine.commit("   ")
        assert engine.log() == []

    def test_log_ascending(self, engine, write_file):
        ids = []
        for i in range(3):
            write_file(f"f{i}.txt", str(i))
            ids.append(engine.commit(f"commit {i}").commit.id)

        commits = engine.log()

        assert [c.id for c in commits] == ids
        assert ids == sorted(ids) and len(set(ids)) == 3
        timestamps = [c.timestamp for c in commits]
        assert timestamps == sorted(timestamps)
        assert [c.message for c in commits] == ["commit 0", "commit 1", "commit 2"]


class TestNotInitialized:
    """Test operations outside a project."""

    @pytest.mark.parametrize("operation", ["status", "log"])
    def test_read_operations(self, tmp_path, operation):
        with pytest.raises(NotInitialized):
            getattr(CommitEngine(tmp_path), operation)()

    def test_commit(self, tmp_path):
        with pytest.raises(NotInitialized):
            CommitEngine(tmp_path).commit("msg")

    def test_discover_from_subdirectory(self, project):
        sub = project / "a" / "b"
        sub.mkdir(parents=True)

        assert ProjectContext.discover(sub).root == project.resolve()

    def test_discover_outside_project(self, tmp_path):
        with pytest.raises(NotInitialized):
            ProjectContext.discover(tmp_path)


class TestStoreFailures:
    """Test operations against a damaged control directory."""

    def test_missing_store(self, engine, project):
        (project / ".treesnap" / "history.db").unlink()

        with pytest.raises(StoreUnavailable):
            engine.status()
        with pytest.raises(StoreUnavailable):
            engine.commit("msg")

    def test_corrupt_config(self, engine, project):
        (project / ".treesnap" / "config.yaml").write_text("fingerprint_strategy: [")

        with pytest.raises(ConfigError):
            engine.status()

    def test_unknown_strategy_in_config(self, engine, project):
        config_path = project / ".treesnap" / "config.yaml"
        data = yaml.safe_load(config_path.read_text())
        data["fingerprint_strategy"] = "bogus"
        config_path.write_text(yaml.safe_dump(data))

        with pytest.raises(ConfigError):
            engine.status()
