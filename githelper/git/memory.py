# git-helper In-Memory Backend
# Deterministic stand-in for a git repository with a single remote

import hashlib
from dataclasses import dataclass, field
from typing import Optional

from githelper.errors import ExternalToolFailure
from githelper.git.backend import MergeStrategy, VcsBackend

Tree = dict[str, str]


@dataclass(frozen=True)
class Commit:
    """A snapshot of the whole tree."""

    sha: str
    message: str
    tree: Tree
    parents: tuple[str, ...] = ()
    generation: int = 0

    @property
    def short(self) -> str:
        return self.sha[:7]


@dataclass
class StashEntry:
    """Local changes saved on top of ``base``."""

    branch: str
    base: str
    tree: Tree = field(default_factory=dict)


class InMemoryGit(VcsBackend):
    """
    Repository simulation for tests.

    Models commits, local branches, the branches on the remote server, the
    remote-tracking refs last fetched from it, a working tree, an index and
    a stash stack. Merges are three-way over whole files. Working-tree paths
    missing from the index are untracked: resets, stashes and merges leave
    them in place. Every public call is recorded in ``calls`` as
    ``(method, args...)``.
    """

    def __init__(
        self,
        branch: str = "main",
        files: Optional[Tree] = None,
        *,
        remote: str = "origin",
    ):
        self.remote = remote
        self.commits: dict[str, Commit] = {}
        self.branches: dict[str, str] = {}
        self.remote_branches: dict[str, str] = {}
        self.tracking: dict[str, str] = {}
        self.upstreams: dict[str, str] = {}
        self.stashes: list[StashEntry] = []
        self.merge_head: Optional[str] = None
        self.calls: list[tuple] = []
        self._failures: dict[str, ExternalToolFailure] = {}
        self._counter = 0

        root = self._new_commit("Initial commit", dict(files or {"README.md": "init\n"}), ())
        self.head = branch
        self.branches[branch] = root.sha
        self.remote_branches[branch] = root.sha
        self.tracking[branch] = root.sha
        self.upstreams[branch] = remote
        self.index: Tree = dict(root.tree)
        self.worktree: Tree = dict(root.tree)

    # ------------------------------------------------------------------
    # Test helpers (not recorded)
    # ------------------------------------------------------------------

    def fail_on(self, method: str, returncode: int = 1, stderr: str = "") -> None:
        """Make every later call to ``method`` fail."""
        self._failures[method] = ExternalToolFailure(
            f"Git command failed: {method}", returncode=returncode, stderr=stderr
        )

    def write(self, path: str, content: Optional[str]) -> None:
        """Change a file in the working tree. ``None`` deletes it."""
        if content is None:
            self.worktree.pop(path, None)
        else:
            self.worktree[path] = content

    def commit_on(self, branch: str, message: str, changes: Tree) -> str:
        """Commit ``changes`` directly on a local branch."""
        parent = self.commits[self.branches[branch]]
        tree = {**parent.tree, **changes}
        commit = self._new_commit(message, tree, (parent.sha,))
        self.branches[branch] = commit.sha
        if branch == self.head:
            self.worktree = {**self._untracked(), **tree}
            self.index = dict(tree)
        return commit.sha

    def commit_on_remote(self, branch: str, message: str, changes: Tree) -> str:
        """Commit ``changes`` on the remote server, as another developer would."""
        parent_sha = self.remote_branches.get(branch) or self.branches[self.head]
        parent = self.commits[parent_sha]
        commit = self._new_commit(message, {**parent.tree, **changes}, (parent.sha,))
        self.remote_branches[branch] = commit.sha
        return commit.sha

    def tree_of(self, ref: str) -> Tree:
        sha = self._resolve(ref)
        if sha is None:
            raise KeyError(ref)
        return dict(self.commits[sha].tree)

    def history(self, ref: str = "HEAD") -> list[str]:
        """Commit subjects along first parents, newest first."""
        return [self.commits[sha].message for sha in self._first_parent_chain(ref)]

    @property
    def head_tree(self) -> Tree:
        return self.commits[self.branches[self.head]].tree

    @property
    def is_clean(self) -> bool:
        """No staged, modified or untracked files, as ``git status --porcelain`` sees it."""
        return self.worktree == self.head_tree and self.index == self.head_tree

    @property
    def untracked(self) -> list[str]:
        """Working-tree paths that are not in the index."""
        return sorted(self._untracked())

    @property
    def operations(self) -> list[str]:
        """Names of the recorded calls, in order."""
        return [call[0] for call in self.calls]

    # ------------------------------------------------------------------
    # VcsBackend
    # ------------------------------------------------------------------

    def current_branch(self) -> Optional[str]:
        self._record("current_branch")
        return self.head

    def stage_all(self) -> None:
        self._record("stage_all")
        self.index = dict(self.worktree)

    def commit(self, message: str) -> None:
        self._record("commit", message)
        if self.merge_head is None and self.index == self.head_tree:
            self._fail("commit", "nothing to commit, working tree clean")
        parents: tuple[str, ...] = (self.branches[self.head],)
        if self.merge_head is not None:
            parents += (self.merge_head,)
        commit = self._new_commit(message, dict(self.index), parents)
        self.branches[self.head] = commit.sha
        self.merge_head = None

    def push(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        set_upstream: bool = False,
    ) -> None:
        self._record("push", remote, branch, set_upstream)
        name = branch or self.head
        if remote is None and name not in self.upstreams:
            self._fail("push", f"fatal: The current branch {name} has no upstream branch.", 128)
        if name not in self.branches:
            self._fail("push", f"error: src refspec {name} does not match any", 1)
        local = self.branches[name]
        current = self.remote_branches.get(name)
        if current is not None and not self._is_ancestor(current, local):
            self._fail("push", f"! [rejected] {name} -> {name} (non-fast-forward)")
        self.remote_branches[name] = local
        self.tracking[name] = local
        if set_upstream:
            self.upstreams[name] = remote or self.remote

    def pull(self, remote: Optional[str] = None, branch: Optional[str] = None) -> None:
        self._record("pull", remote, branch)
        name = branch or self.head
        if branch is None and self.head not in self.upstreams:
            self._fail("pull", "There is no tracking information for the current branch.")
        if name not in self.remote_branches:
            self._fail("pull", f"fatal: couldn't find remote ref {name}", 1)
        self.tracking[name] = self.remote_branches[name]
        self._merge(self.tracking[name], f"{self.remote}/{name}", None)

    def fetch(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        all_remotes: bool = False,
    ) -> None:
        self._record("fetch", remote, branch, all_remotes)
        if branch is None:
            self.tracking = dict(self.remote_branches)
            return
        if branch not in self.remote_branches:
            self._fail("fetch", f"fatal: couldn't find remote ref {branch}", 128)
        self.tracking[branch] = self.remote_branches[branch]

    def merge(self, ref: str, strategy: Optional[MergeStrategy] = None) -> None:
        self._record("merge", ref, strategy)
        sha = self._resolve(ref)
        if sha is None:
            self._fail("merge", f"merge: {ref} - not something we can merge")
        self._merge(sha, ref, strategy)

    def abort_merge(self) -> None:
        self._record("abort_merge")
        if self.merge_head is None:
            self._fail("abort_merge", "fatal: There is no merge to abort (MERGE_HEAD missing).", 128)
        untracked = self._untracked()
        self.merge_head = None
        self.index = dict(self.head_tree)
        self.worktree = {**untracked, **self.head_tree}

    def reset(self, ref: str, *, hard: bool = False) -> None:
        self._record("reset", ref, hard)
        sha = self._resolve(ref)
        if sha is None:
            self._fail("reset", f"fatal: ambiguous argument '{ref}': unknown revision", 128)
        untracked = self._untracked()
        self.branches[self.head] = sha
        self.merge_head = None
        self.index = dict(self.head_tree)
        if hard:
            self.worktree = {**untracked, **self.head_tree}

    def stash_push(self) -> None:
        self._record("stash_push")
        if self.merge_head is not None:
            self._fail("stash_push", "error: could not write index; merge in progress")
        head_tree = self.head_tree
        tracked = {path: self.worktree.get(path) for path in set(self.index) | set(head_tree)}
        if self.index == head_tree and all(content == head_tree.get(path) for path, content in tracked.items()):
            return
        # untracked files are neither saved nor removed
        untracked = self._untracked()
        saved = {path: content for path, content in tracked.items() if content is not None}
        self.stashes.insert(0, StashEntry(branch=self.head, base=self.branches[self.head], tree=saved))
        self.index = dict(head_tree)
        self.worktree = {**untracked, **head_tree}

    def stash_apply(self) -> None:
        self._record("stash_apply")
        if not self.stashes:
            self._fail("stash_apply", "No stash entries found.")
        entry = self.stashes[0]
        base = self.commits[entry.base].tree
        for path in set(base) | set(entry.tree):
            if base.get(path) == entry.tree.get(path):
                continue
            self.write(path, entry.tree.get(path))

    def stash_clear(self) -> None:
        self._record("stash_clear")
        self.stashes = []

    def stash_list(self) -> list[str]:
        self._record("stash_list")
        return [
            f"stash@{{{i}}}: WIP on {entry.branch}: {self.commits[entry.base].short} "
            f"{self.commits[entry.base].message}"
            for i, entry in enumerate(self.stashes)
        ]

    def local_branch_exists(self, name: str) -> bool:
        self._record("local_branch_exists", name)
        return name in self.branches

    def remote_branch_exists(self, name: str, remote: str = "origin") -> bool:
        self._record("remote_branch_exists", name, remote)
        return remote == self.remote and name in self.remote_branches

    def checkout(self, name: str) -> None:
        self._record("checkout", name)
        if name not in self.branches:
            if name not in self.tracking:
                self._fail("checkout", f"error: pathspec '{name}' did not match any file(s) known to git")
            self.branches[name] = self.tracking[name]
            self.upstreams[name] = self.remote
        self._switch(name, "checkout")

    def checkout_new(self, name: str, start_point: Optional[str] = None) -> None:
        self._record("checkout_new", name, start_point)
        if name in self.branches:
            self._fail("checkout_new", f"fatal: a branch named '{name}' already exists", 128)
        sha = self._resolve(start_point) if start_point else self.branches[self.head]
        if sha is None:
            self._fail("checkout_new", f"fatal: '{start_point}' is not a commit", 128)
        self.branches[name] = sha
        if start_point and start_point.startswith(f"{self.remote}/"):
            self.upstreams[name] = self.remote
        self._switch(name, "checkout_new")

    def log_oneline(self, count: int) -> list[str]:
        self._record("log_oneline", count)
        chain = self._first_parent_chain("HEAD")[:count]
        return [f"{self.commits[sha].short} {self.commits[sha].message}" for sha in chain]

    def log_graph(self, count: Optional[int] = None) -> str:
        self._record("log_graph", count)
        labels: dict[str, list[str]] = {}
        for name, sha in self.branches.items():
            labels.setdefault(sha, []).append(f"HEAD -> {name}" if name == self.head else name)
        for name, sha in self.tracking.items():
            labels.setdefault(sha, []).append(f"{self.remote}/{name}")
        ordered = sorted(self.commits.values(), key=lambda c: c.generation, reverse=True)
        if count:
            ordered = ordered[:count]
        lines = []
        for commit in ordered:
            decoration = f" ({', '.join(labels[commit.sha])})" if commit.sha in labels else ""
            lines.append(f"* {commit.short}{decoration} {commit.message}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        if method in self._failures:
            raise self._failures[method]

    def _fail(self, method: str, stderr: str, returncode: int = 1):
        raise ExternalToolFailure(f"Git command failed: {method}", returncode=returncode, stderr=stderr)

    def _untracked(self) -> Tree:
        return {path: content for path, content in self.worktree.items() if path not in self.index}

    def _new_commit(self, message: str, tree: Tree, parents: tuple[str, ...]) -> Commit:
        self._counter += 1
        digest = hashlib.sha1(f"{self._counter}:{message}:{parents}".encode("utf-8")).hexdigest()
        commit = Commit(sha=digest, message=message, tree=tree, parents=parents, generation=self._counter)
        self.commits[digest] = commit
        return commit

    def _resolve(self, ref: Optional[str]) -> Optional[str]:
        if not ref:
            return None
        if ref == "HEAD":
            return self.branches[self.head]
        if ref in self.branches:
            return self.branches[ref]
        prefix = f"{self.remote}/"
        if ref.startswith(prefix) and ref[len(prefix):] in self.tracking:
            return self.tracking[ref[len(prefix):]]
        if ref in self.commits:
            return ref
        if len(ref) >= 4:
            matches = [sha for sha in self.commits if sha.startswith(ref)]
            if len(matches) == 1:
                return matches[0]
        return None

    def _ancestors(self, sha: str) -> set[str]:
        seen: set[str] = set()
        stack = [sha]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self.commits[current].parents)
        return seen

    def _is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return ancestor in self._ancestors(descendant)

    def _merge_base(self, a: str, b: str) -> Optional[str]:
        common = self._ancestors(a) & self._ancestors(b)
        if not common:
            return None
        return max(common, key=lambda sha: self.commits[sha].generation)

    def _first_parent_chain(self, ref: str) -> list[str]:
        sha = self._resolve(ref)
        chain = []
        while sha is not None:
            chain.append(sha)
            parents = self.commits[sha].parents
            sha = parents[0] if parents else None
        return chain

    def _merge(self, theirs: str, label: str, strategy: Optional[MergeStrategy]) -> None:
        if self.merge_head is not None:
            self._fail("merge", "fatal: You have not concluded your merge (MERGE_HEAD exists).", 128)

        ours = self.branches[self.head]
        if self._is_ancestor(theirs, ours):
            return

        untracked = self._untracked()
        if self._is_ancestor(ours, theirs):
            self.branches[self.head] = theirs
            self.index = dict(self.head_tree)
            self.worktree = {**untracked, **self.head_tree}
            return

        base_sha = self._merge_base(ours, theirs)
        base = self.commits[base_sha].tree if base_sha else {}
        our_tree = self.commits[ours].tree
        their_tree = self.commits[theirs].tree

        merged: Tree = {}
        conflicts: list[str] = []
        for path in sorted(set(base) | set(our_tree) | set(their_tree)):
            b, o, t = base.get(path), our_tree.get(path), their_tree.get(path)
            if o == t or b == t:
                result = o
            elif b == o:
                result = t
            elif strategy is MergeStrategy.OURS:
                result = o
            elif strategy is MergeStrategy.THEIRS:
                result = t
            else:
                conflicts.append(path)
                result = f"<<<<<<< HEAD\n{o or ''}=======\n{t or ''}>>>>>>> {label}\n"
            if result is not None:
                merged[path] = result

        if conflicts:
            self.merge_head = theirs
            # clean paths are staged; conflicted ones keep our side in the index
            self.index = {path: content for path, content in merged.items() if path not in conflicts}
            self.index.update({path: our_tree[path] for path in conflicts if path in our_tree})
            self.worktree = {**untracked, **merged}
            self._fail("merge", f"CONFLICT (content): Merge conflict in {', '.join(conflicts)}")

        commit = self._new_commit(f"Merge {label} into {self.head}", merged, (ours, theirs))
        self.branches[self.head] = commit.sha
        self.index = dict(merged)
        self.worktree = {**untracked, **merged}

    def _switch(self, name: str, method: str) -> None:
        if self.merge_head is not None:
            self._fail(method, "error: you need to resolve your current index first")
        old_tree = self.head_tree
        new_tree = self.commits[self.branches[name]].tree
        changed = {
            path for path in set(old_tree) | set(self.worktree) if old_tree.get(path) != self.worktree.get(path)
        }
        for path in changed:
            if old_tree.get(path) != new_tree.get(path):
                self._fail(method, "error: Your local changes to the following files would be overwritten by checkout")
        worktree = dict(new_tree)
        for path in changed:
            if path in self.worktree:
                worktree[path] = self.worktree[path]
            else:
                worktree.pop(path, None)
        self.head = name
        self.worktree = worktree
        self.index = dict(new_tree)
