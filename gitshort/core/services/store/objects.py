"""
Git object store: the plumbing layer under the record store.

Everything here shells out to the ``git`` CLI:

    - ``run()`` operates in the repository root (``git -C <root>``)
    - lookups report *ambiguous* distinctly from *missing*
    - nothing in this module knows what a record is

Local plumbing calls use a fixed timeout.  Push and fetch use the
configured ``network_timeout``, which is ``None`` (block) by default.
"""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from gitshort.core.services.store.errors import (
    AmbiguousPrefix,
    DecodeFailure,
    GitCommandError,
    RepositoryStateError,
)

logger = logging.getLogger(__name__)

# ─── Constants ──────────────────────────────────────────────────────────

LOCAL_TIMEOUT = 30

HEX_PREFIX_RE = re.compile(r"[0-9a-fA-F]{4,}")

_AUTHOR_RE = re.compile(
    r"^(?P<name>.*?) <(?P<email>[^>]*)> (?P<time>-?\d+) (?P<tz>[+-]\d{4})$"
)

# Marker files in the git dir that mean a multi-step operation is underway
_IN_PROGRESS_MARKERS = {
    "MERGE_HEAD": "merge",
    "rebase-merge": "rebase",
    "rebase-apply": "rebase",
    "CHERRY_PICK_HEAD": "cherry-pick",
    "REVERT_HEAD": "revert",
    "BISECT_LOG": "bisect",
}


# ═══════════════════════════════════════════════════════════════════════
#  Data shapes
# ═══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CommitObject:
    """A parsed commit object (``git cat-file commit``)."""

    oid: str
    tree: str
    parents: tuple[str, ...]
    author_name: str
    author_email: str
    author_time: int
    author_offset: int          # minutes east of UTC
    message: str


@dataclass(frozen=True)
class PushOutcome:
    """Result of a single ``git push --porcelain``."""

    ok: bool
    non_fast_forward: bool = False
    stdout: str = ""
    stderr: str = ""


def _parse_offset(tz: str) -> int:
    """``+0130`` → 90, ``-0800`` → -480."""
    sign = -1 if tz.startswith("-") else 1
    return sign * (int(tz[1:3]) * 60 + int(tz[3:5]))


def parse_commit(oid: str, raw: bytes) -> CommitObject:
    """Parse the raw bytes of a commit object.

    The message is decoded with the commit's ``encoding`` header (UTF-8
    when absent), as git itself does.

    Raises:
        DecodeFailure: The message is not valid in its declared encoding.
    """
    head, _, body = raw.partition(b"\n\n")

    encoding = "utf-8"
    for line in head.split(b"\n"):
        if line.startswith(b"encoding "):
            encoding = line[len(b"encoding "):].decode("ascii", "replace").strip()

    try:
        message = body.decode(encoding)
    except (LookupError, UnicodeDecodeError) as e:
        raise DecodeFailure(f"Cannot decode commit {oid[:12]} as {encoding}: {e}") from e
    try:
        header = head.decode(encoding)
    except UnicodeDecodeError:
        header = head.decode(encoding, "replace")

    tree = ""
    parents: list[str] = []
    author = None
    for line in header.split("\n"):
        if line.startswith(" "):
            continue  # continuation of a multi-line header (gpgsig, mergetag)
        key, _, value = line.partition(" ")
        if key == "tree":
            tree = value
        elif key == "parent":
            parents.append(value)
        elif key == "author":
            author = _AUTHOR_RE.match(value)

    if not tree or author is None:
        raise GitCommandError(["cat-file", "commit", oid], 0, "malformed commit object")

    return CommitObject(
        oid=oid,
        tree=tree,
        parents=tuple(parents),
        author_name=author.group("name"),
        author_email=author.group("email"),
        author_time=int(author.group("time")),
        author_offset=_parse_offset(author.group("tz")),
        message=message,
    )


# ═══════════════════════════════════════════════════════════════════════
#  Object store
# ═══════════════════════════════════════════════════════════════════════


class GitObjectStore:
    """Commit object store backed by a git repository on disk."""

    def __init__(self, path: Path, *, network_timeout: float | None = None):
        self.network_timeout = network_timeout

        r = _run_git("rev-parse", "--is-bare-repository", "--absolute-git-dir", cwd=Path(path))
        if r.returncode != 0:
            raise RepositoryStateError(f"Not a git repository: {path}")
        bare, git_dir = r.stdout.strip().splitlines()[:2]
        self.bare = bare == "true"
        self.git_dir = Path(git_dir)

        if self.bare:
            self.root = self.git_dir
        else:
            r = _run_git("rev-parse", "--show-toplevel", cwd=Path(path))
            if r.returncode != 0:
                raise RepositoryStateError(f"Cannot locate work tree of {path}: {r.stderr.strip()}")
            self.root = Path(r.stdout.strip())

        logger.debug("Opened repository %s (git dir %s)", self.root, self.git_dir)

    def __repr__(self) -> str:
        return f"<GitObjectStore root={str(self.root)!r}>"

    # ── Runners ─────────────────────────────────────────────────

    def run(
        self,
        *args: str,
        input: str | None = None,
        timeout: float | None = LOCAL_TIMEOUT,
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command in the repository root."""
        return _run_git(*args, cwd=self.root, input=input, timeout=timeout)

    def check(self, *args: str, input: str | None = None) -> str:
        """Run a git command and return stdout, raising on failure."""
        r = self.run(*args, input=input)
        if r.returncode != 0:
            raise GitCommandError(list(args), r.returncode, r.stderr)
        return r.stdout

    # ── Object lookup ───────────────────────────────────────────

    def lookup_prefix(self, prefix: str) -> tuple[str, str] | None:
        """Look up an object by full or abbreviated hex id.

        Returns:
            ``(oid, type)`` for a unique match, or None if nothing matches.

        Raises:
            AmbiguousPrefix: More than one object shares the prefix.
        """
        if not HEX_PREFIX_RE.fullmatch(prefix):
            return None

        out = self.check("cat-file", "--batch-check", input=f"{prefix.lower()}\n").strip()
        fields = out.split()
        if len(fields) == 2 and fields[1] == "ambiguous":
            raise AmbiguousPrefix(prefix)
        if len(fields) < 3:
            return None  # "<prefix> missing"
        return fields[0], fields[1]

    def object_type(self, oid: str) -> str | None:
        """Return the object type (commit, tree, blob, tag) or None."""
        r = self.run("cat-file", "-t", oid)
        if r.returncode != 0:
            return None
        return r.stdout.strip()

    def read_commit(self, oid: str) -> CommitObject:
        """Read and parse a commit object."""
        return parse_commit(oid, self.read_raw("commit", oid))

    def read_raw(self, kind: str, oid: str) -> bytes:
        """Undecoded body of an object (``git cat-file <kind> <oid>``)."""
        args = ["cat-file", kind, oid]
        cmd = ["git", "-C", str(self.root), *args]
        logger.debug("git: %s", " ".join(cmd))
        r = subprocess.run(cmd, capture_output=True, timeout=LOCAL_TIMEOUT)
        if r.returncode != 0:
            raise GitCommandError(args, r.returncode, r.stderr.decode("utf-8", "replace"))
        return r.stdout

    def resolve_revision(self, rev: str) -> str | None:
        """Resolve any revision expression to a commit id, or None."""
        r = self.run("rev-parse", "--verify", "--quiet", "--end-of-options", f"{rev}^{{commit}}")
        if r.returncode != 0:
            return None
        return r.stdout.strip()

    def tree_of(self, oid: str) -> str:
        return self.check("rev-parse", "--verify", f"{oid}^{{tree}}").strip()

    # ── Branch & index state ────────────────────────────────────

    def branch_tip(self, branch: str) -> str | None:
        """Commit id at ``refs/heads/<branch>``, or None if unborn."""
        return self.resolve_revision(f"refs/heads/{branch}")

    def current_branch(self) -> str | None:
        """Short name of the checked-out branch (None when detached)."""
        r = self.run("symbolic-ref", "--quiet", "--short", "HEAD")
        if r.returncode != 0:
            return None
        return r.stdout.strip()

    def checkout(self, branch: str) -> None:
        self.check("checkout", "--quiet", branch, "--")

    def has_unmerged_entries(self) -> bool:
        return bool(self.check("ls-files", "--unmerged").strip())

    def has_staged_changes(self) -> bool:
        """True if the index differs from HEAD (or from empty, when unborn)."""
        r = self.run("diff", "--cached", "--quiet")
        if r.returncode == 0:
            return False
        if r.returncode == 1:
            return True
        raise GitCommandError(["diff", "--cached", "--quiet"], r.returncode, r.stderr)

    def operation_in_progress(self) -> str | None:
        """Name of the merge/rebase/cherry-pick/... underway, if any."""
        for marker, name in _IN_PROGRESS_MARKERS.items():
            if (self.git_dir / marker).exists():
                return name
        return None

    # ── Writes ──────────────────────────────────────────────────

    def commit_tree(self, tree: str, parents: list[str], message: str) -> str:
        """Create a commit object (no refs move). Returns its id."""
        args = ["commit-tree", tree]
        for parent in parents:
            args += ["-p", parent]
        args += ["-F", "-"]
        return self.check(*args, input=message).strip()

    def update_ref(self, ref: str, new: str, old: str, *, reason: str = "gitshort") -> None:
        """Move *ref* to *new* only if it still points at *old*."""
        self.check("update-ref", "-m", reason, ref, new, old)

    # ── History ─────────────────────────────────────────────────

    def iter_rev_list(self, *args: str) -> Iterator[str]:
        """Stream commit ids from ``git rev-list``.

        Ends normally when rev-list is exhausted; a non-zero exit raises
        ``GitCommandError``.  Closing the iterator early kills the child.
        """
        cmd = ["git", "-C", str(self.root), "rev-list", *args]
        logger.debug("git: %s", " ".join(cmd))

        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
        )
        try:
            if proc.stdout:
                for line in proc.stdout:
                    oid = line.strip()
                    if oid:
                        yield oid
            stderr = proc.stderr.read() if proc.stderr else ""
            proc.wait()
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            for stream in (proc.stdout, proc.stderr):
                if stream:
                    stream.close()

        if proc.returncode != 0:
            raise GitCommandError(["rev-list", *args], proc.returncode, stderr)

    # ── Remotes ─────────────────────────────────────────────────

    def push(self, remote: str, branch: str) -> PushOutcome:
        """Push ``refs/heads/<branch>`` to the same ref on *remote*."""
        refspec = f"refs/heads/{branch}:refs/heads/{branch}"
        r = self.run("push", "--porcelain", remote, refspec, timeout=self.network_timeout)
        if r.returncode == 0:
            return PushOutcome(ok=True, stdout=r.stdout, stderr=r.stderr)

        rejected = [line for line in r.stdout.splitlines() if line.startswith("!")]
        text = "\n".join(rejected) + "\n" + r.stderr
        non_ff = "non-fast-forward" in text or "fetch first" in text
        return PushOutcome(ok=False, non_fast_forward=non_ff, stdout=r.stdout, stderr=r.stderr)

    def fetch(self, remote: str, branch: str) -> subprocess.CompletedProcess[str]:
        """Fetch *branch* into ``refs/remotes/<remote>/<branch>``."""
        refspec = f"+refs/heads/{branch}:{remote_tracking_ref(remote, branch)}"
        return self.run("fetch", remote, refspec, timeout=self.network_timeout)

    def merge(self, ref: str) -> subprocess.CompletedProcess[str]:
        return self.run("merge", "--no-edit", ref)

    def merge_abort(self) -> None:
        r = self.run("merge", "--abort")
        if r.returncode != 0:
            logger.warning("git merge --abort failed: %s", r.stderr.strip())


def remote_tracking_ref(remote: str, branch: str) -> str:
    """Remote-tracking ref for *branch*: ``refs/remotes/<remote>/<branch>``."""
    return f"refs/remotes/{remote}/{branch}"


def _run_git(
    *args: str,
    cwd: Path,
    input: str | None = None,
    timeout: float | None = LOCAL_TIMEOUT,
) -> subprocess.CompletedProcess[str]:
    cmd = ["git", "-C", str(cwd), *args]
    logger.debug("git: %s", " ".join(cmd))
    return subprocess.run(
        cmd,
        input=input,
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=timeout,
    )
