"""Unit tests for overlay resolution."""

import pytest
from dfm.core.errors import PathNotFoundError
from dfm.core.resolver import resolve_all, resolve_paths
from dfm.filesystem.memory import MemoryFilesystem


@pytest.fixture
def layered() -> MemoryFilesystem:
    """Two repos that both provide .bashrc."""
    fs = MemoryFilesystem()
    fs.write_file("/dots/one/.bashrc", "one")
    fs.write_file("/dots/one/.vimrc", "one")
    fs.write_file("/dots/two/.bashrc", "two")
    fs.write_file("/dots/two/.config/git/config", "two")
    return fs


class TestResolveAll:
    """Tests for resolve_all."""

    def test_last_repo_wins(self, layered: MemoryFilesystem) -> None:
        """A path provided by several repos belongs to the last one."""
        files = resolve_all(layered, "/dots", ["one", "two"])

        assert files == {".bashrc": "two", ".vimrc": "one", ".config/git/config": "two"}

    def test_order_of_first_discovery(self, layered: MemoryFilesystem) -> None:
        """Paths keep the position where they were first found."""
        files = resolve_all(layered, "/dots", ["one", "two"])

        assert list(files) == [".bashrc", ".vimrc", ".config/git/config"]

    def test_reversed_precedence(self, layered: MemoryFilesystem) -> None:
        """Swapping the repo order swaps the owner."""
        assert resolve_all(layered, "/dots", ["two", "one"])[".bashrc"] == "one"

    def test_missing_repo_is_empty(self, layered: MemoryFilesystem) -> None:
        """A repo directory that does not exist contributes nothing."""
        assert resolve_all(layered, "/dots", ["missing"]) == {}


class TestResolvePaths:
    """Tests for resolve_paths."""

    def test_single_file(self, layered: MemoryFilesystem) -> None:
        """An explicit file resolves to its highest-precedence owner."""
        assert resolve_paths(layered, "/dots", ["one", "two"], [".bashrc"]) == {".bashrc": "two"}

    def test_directory_expands(self, layered: MemoryFilesystem) -> None:
        """A directory contributes every file beneath it."""
        files = resolve_paths(layered, "/dots", ["one", "two"], [".config"])

        assert files == {".config/git/config": "two"}

    def test_dot_means_everything(self, layered: MemoryFilesystem) -> None:
        """"." resolves every file of every repo."""
        files = resolve_paths(layered, "/dots", ["one", "two"], ["."])

        assert files == resolve_all(layered, "/dots", ["one", "two"])

    def test_missing_path_raises(self, layered: MemoryFilesystem) -> None:
        """A path found in no repo is an error."""
        with pytest.raises(PathNotFoundError, match=".zshrc"):
            resolve_paths(layered, "/dots", ["one", "two"], [".zshrc"])

    def test_missing_but_tracked_is_allowed(self, layered: MemoryFilesystem) -> None:
        """A path deleted upstream but still tracked resolves to nothing."""
        files = resolve_paths(layered, "/dots", ["one"], [".zshrc"], tracked=[".zshrc"])

        assert files == {}

    def test_symlinked_repo_root(self, layered: MemoryFilesystem) -> None:
        """A repo whose root is a symlink resolves like a real directory."""
        layered.symlink("/dots/one", "/dots/alias")

        assert resolve_paths(layered, "/dots", ["alias"], ["."]) == {
            ".bashrc": "alias",
            ".vimrc": "alias",
        }
        assert resolve_paths(layered, "/dots", ["alias"], [".vimrc"]) == {".vimrc": "alias"}
        assert resolve_all(layered, "/dots", ["alias"]) == {".bashrc": "alias", ".vimrc": "alias"}
