"""Shared pytest fixtures for SrcPack tests."""
import os
import random
import string
import tarfile
import tempfile
from pathlib import Path
from typing import Callable, Generator, Iterable, List

import pytest

import srcpack.core.logging as srcpack_logging

CONTENT_LENGTH = 10

# Tree shared by most archiver tests; trailing "/" marks a directory
STANDARD_TREE = [
    "dir/",
    "dir/a.txt",
    "dir/b.txt",
    ".git/",
    "directory/",
    "directory/a.txt",
    "directory/b.txt",
    "directory/.git",
]

NESTED_TREE = [
    "dir/",
    "dir/a.txt",
    "dir/b.txt",
    "dir/nesteddir/",
    "dir/nesteddir/a.txt",
    "dir/nesteddir/b.txt",
    ".git/",
    "a.txt",
    "b.txt",
    "directory/",
    "directory/a.txt",
    "directory/b.txt",
    "directory/.git",
]


def random_content(length: int = CONTENT_LENGTH) -> str:
    return "".join(random.choice(string.ascii_letters) for _ in range(length))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tarball(temp_dir: Path) -> Path:
    """Destination archive path inside the temp directory."""
    return temp_dir / "a.tar.gz"


@pytest.fixture
def prepare_files(temp_dir: Path) -> Callable[..., Path]:
    """Build a source tree from a list of entries ("x/" = directory)."""

    def _prepare(entries: Iterable[str], name: str = "source") -> Path:
        root = temp_dir / name
        root.mkdir()
        for entry in entries:
            path = root / entry
            if entry.endswith("/"):
                path.mkdir(parents=True, exist_ok=True)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(random_content())
        return root

    return _prepare


@pytest.fixture
def strip_root() -> Callable[[Path, Iterable[str]], List[str]]:
    """Turn absolute archived paths back into root-relative names."""

    def _strip(root: Path, paths: Iterable[str]) -> List[str]:
        prefix = os.path.abspath(root) + os.sep
        return [p[len(prefix):] if p.startswith(prefix) else p for p in paths]

    return _strip


@pytest.fixture
def archive_names() -> Callable[[Path], List[str]]:
    """Read member names back from a .tar.gz file."""

    def _names(path: Path) -> List[str]:
        with tarfile.open(path, "r:gz") as tar:
            return tar.getnames()

    return _names


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop cached loggers so handlers bind to this test's stderr."""
    srcpack_logging._loggers.clear()
    yield
    srcpack_logging._loggers.clear()


@pytest.fixture
def standard_source(prepare_files: Callable[..., Path]) -> Path:
    """Source with dir/, directory/ and .git entries."""
    return prepare_files(STANDARD_TREE)


@pytest.fixture
def flat_source(prepare_files: Callable[..., Path]) -> Path:
    """Standard source plus top-level a.txt and b.txt."""
    return prepare_files(STANDARD_TREE + ["a.txt", "b.txt"])


@pytest.fixture
def nested_source(prepare_files: Callable[..., Path]) -> Path:
    """Source with a nested directory under dir/ and top-level files."""
    return prepare_files(NESTED_TREE)
