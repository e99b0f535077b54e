# git-helper Git Module
# Backend interface plus the real and in-memory adapters

from githelper.git.backend import MergeStrategy, StashMode, VcsBackend
from githelper.git.memory import InMemoryGit
from githelper.git.operations import GitBackend

__all__ = [
    "VcsBackend",
    "MergeStrategy",
    "StashMode",
    "GitBackend",
    "InMemoryGit",
]
