"""Shared test fixtures — sample patches, fake backend, temp git repos."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from tinydiff.git.adapter import GitBackend, StatusRecord
from tinydiff.git.models import DiffTarget


@pytest.fixture
def sample_diff_added() -> str:
    """A new file."""
    return textwrap.dedent("""\
        diff --git a/hello.py b/hello.py
        new file mode 100644
        index 0000000..e69de29
        --- /dev/null
        +++ b/hello.py
        @@ -0,0 +1,3 @@
        +def greet(name):
        +    return f"Hello, {name}!"
        +
    """)


@pytest.fixture
def sample_diff_modified() -> str:
    """Two hunks in one file, mixed line kinds."""
    return textwrap.dedent("""\
        diff --git a/app.py b/app.py
        index 1234567..abcdef0 100644
        --- a/app.py
        +++ b/app.py
        @@ -1,4 +1,4 @@ import os
         import os
        -DEBUG = True
        +DEBUG = False

         def main():
        @@ -20,3 +20,4 @@ def main():
             run()
        +    log()
             return 0

    """)


@pytest.fixture
def sample_diff_deleted() -> str:
    """A removed file."""
    return textwrap.dedent("""\
        diff --git a/gone.txt b/gone.txt
        deleted file mode 100644
        index abc1234..0000000
        --- a/gone.txt
        +++ /dev/null
        @@ -1,2 +0,0 @@
        -first
        -second
    """)


@pytest.fixture
def sample_diff_binary() -> str:
    """A diff with a binary file."""
    return textwrap.dedent("""\
        diff --git a/image.png b/image.png
        new file mode 100644
        index 0000000..abc1234
        Binary files /dev/null and b/image.png differ
    """)


@pytest.fixture
def sample_diff_rename() -> str:
    """A diff with a renamed file."""
    return textwrap.dedent("""\
        diff --git a/old_name.py b/new_name.py
        similarity index 97%
        rename from old_name.py
        rename to new_name.py
        index abc1234..def5678 100644
        --- a/old_name.py
        +++ b/new_name.py
        @@ -1,0 +2,1 @@
        +# New line added after rename
    """)


@pytest.fixture
def sample_diff_pure_rename() -> str:
    """A rename with no content change."""
    return textwrap.dedent("""\
        diff --git a/a.txt b/b.txt
        similarity index 100%
        rename from a.txt
        rename to b.txt
    """)


@pytest.fixture
def sample_diff_mode_only() -> str:
    """A diff with only file mode change."""
    return textwrap.dedent("""\
        diff --git a/script.sh b/script.sh
        old mode 100644
        new mode 100755
    """)


@pytest.fixture
def sample_diff_no_newline() -> str:
    """A diff with 'No newline at end of file' marker."""
    return textwrap.dedent("""\
        diff --git a/data.txt b/data.txt
        index 1111111..2222222 100644
        --- a/data.txt
        +++ b/data.txt
        @@ -1,2 +1,2 @@
         keep
        -old last
        \\ No newline at end of file
        +new last
        \\ No newline at end of file
    """)


@pytest.fixture
def sample_diff_omitted_counts() -> str:
    """Hunk header without line counts."""
    return textwrap.dedent("""\
        diff --git a/one.txt b/one.txt
        index 1111111..2222222 100644
        --- a/one.txt
        +++ b/one.txt
        @@ -1 +1 @@
        -before
        +after
    """)


@pytest.fixture
def sample_diff_dashes_in_body() -> str:
    """Content lines that look like file headers."""
    return textwrap.dedent("""\
        diff --git a/notes.md b/notes.md
        index 1111111..2222222 100644
        --- a/notes.md
        +++ b/notes.md
        @@ -1,2 +1,2 @@
        --- removed rule
        +++ added rule
         tail
    """)


class FakeBackend(GitBackend):
    """In-memory GitBackend for gateway tests."""

    def __init__(
        self,
        workdir: Path,
        *,
        records: Optional[List[StatusRecord]] = None,
        patches: Optional[Dict[DiffTarget, str]] = None,
        head: Optional[Dict[str, bytes]] = None,
        index: Optional[Dict[str, bytes]] = None,
    ) -> None:
        self._workdir = workdir
        self.records = records or []
        self.patches = patches or {}
        self.head = head or {}
        self.index = index or {}
        self.calls: List[tuple] = []

    @property
    def workdir(self) -> Path:
        return self._workdir

    def status(self, *, include_untracked=True, detect_renames=True):
        self.calls.append(("status", include_untracked, detect_renames))
        return list(self.records)

    def diff(self, file_path, target, *, context_lines=5, detect_renames=True):
        self.calls.append(("diff", file_path, target, context_lines))
        return self.patches.get(target, "")

    def blob_at_head(self, file_path):
        return self.head.get(file_path)

    def blob_in_index(self, file_path):
        return self.index.get(file_path)

    def read_workdir_file(self, file_path):
        path = self._workdir / file_path
        return path.read_bytes() if path.is_file() else None


@pytest.fixture
def fake_backend(tmp_path: Path) -> FakeBackend:
    return FakeBackend(tmp_path)


def git(repo: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=repo, capture_output=True, check=True)


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    git(tmp_path, "config", "user.email", "test@test.com")
    git(tmp_path, "config", "user.name", "Test")
    git(tmp_path, "config", "core.autocrlf", "false")
    # Initial commit
    (tmp_path / "README.md").write_text("# Test\n")
    (tmp_path / "app.py").write_text("import os\n\nprint('hi')\n")
    git(tmp_path, "add", ".")
    git(tmp_path, "commit", "-m", "init")
    return tmp_path


@pytest.fixture
def empty_git_repo(tmp_path: Path) -> Path:
    """A repository with no commits (unborn HEAD)."""
    subprocess.run(["git", "init", str(tmp_path)], capture_output=True, check=True)
    git(tmp_path, "config", "user.email", "test@test.com")
    git(tmp_path, "config", "user.name", "Test")
    return tmp_path
