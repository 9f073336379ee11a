"""
Local duplicate detection.

Decides which source commits already exist in the target using only commit
text and metadata. Pure functions, no I/O.
"""
import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Set, Tuple

from cherrypick.models import Commit, Repository

CHERRY_PICK_MARKER = re.compile(r"\(cherry picked from commit.*$", re.IGNORECASE | re.DOTALL)
SHORT_HASH_LENGTH = 7


@dataclass(frozen=True)
class HeuristicPolicy:
    # Same author + same file set counts as a duplicate even when the
    # messages differ. Prone to false positives on small same-file fixes.
    match_metadata: bool = True


def normalize_message(message: str) -> str:
    """Strip a cherry-pick annotation, trim and casefold a message."""
    return CHERRY_PICK_MARKER.sub("", message).strip().casefold()


def _file_set(commit: Commit) -> FrozenSet[str]:
    return frozenset(commit.files_changed)


def _matches_message(commit: Commit, normalized_targets: List[str], raw_targets: List[str]) -> bool:
    message = commit.message.strip().casefold()
    if message in normalized_targets:
        return True
    if len(commit.hash) < SHORT_HASH_LENGTH:
        return False
    prefix = commit.short_hash.casefold()
    return any(prefix in raw for raw in raw_targets)


def _matches_metadata(commit: Commit, target_metadata: Iterable[Tuple[str, FrozenSet[str]]]) -> bool:
    files = _file_set(commit)
    return any(author == commit.author and target_files == files for author, target_files in target_metadata)


def find_duplicates(source: Repository, target: Repository, policy: HeuristicPolicy = HeuristicPolicy()) -> Set[str]:
    """Return the ids of source commits that already landed in target."""
    if not target.commits:
        return set()

    normalized_targets = [normalize_message(c.message) for c in target.commits]
    raw_targets = [c.message.casefold() for c in target.commits]
    target_metadata = [(c.author, _file_set(c)) for c in target.commits]

    duplicates: Set[str] = set()
    for commit in source.commits:
        if _matches_message(commit, normalized_targets, raw_targets):
            duplicates.add(commit.id)
        elif policy.match_metadata and _matches_metadata(commit, target_metadata):
            duplicates.add(commit.id)
    return duplicates


def mark_duplicates(commits: Iterable[Commit], duplicate_ids: Set[str]) -> List[Commit]:
    """Force ``picked`` on commits in the duplicate set, leave the rest untouched."""
    return [c.as_picked() if c.id in duplicate_ids else c for c in commits]
