# modelsync Git Results
# Structured outcomes of fetch, merge, pull and push

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class MergeStatus(str, Enum):
    """Outcome of merging the upstream branch."""

    ALREADY_UP_TO_DATE = "already_up_to_date"
    FAST_FORWARD = "fast_forward"
    MERGED = "merged"
    CONFLICTING = "conflicting"


class RefUpdateStatus(str, Enum):
    """Status of a single remote ref after a push."""

    OK = "ok"
    UP_TO_DATE = "up_to_date"
    REJECTED = "rejected"
    REMOTE_REJECTED = "remote_rejected"


@dataclass(frozen=True)
class TrackingRefUpdate:
    """A remote-tracking ref changed by a fetch. None ids mean created/pruned."""

    ref: str
    old_id: Optional[str]
    new_id: Optional[str]


@dataclass
class FetchResult:
    """Result of a fetch."""

    tracking_ref_updates: list[TrackingRefUpdate] = field(default_factory=list)

    @classmethod
    def from_snapshots(cls, before: dict[str, str], after: dict[str, str]) -> "FetchResult":
        """Build a result by comparing tracking refs before and after fetching."""
        updates = [
            TrackingRefUpdate(ref=name, old_id=before.get(name), new_id=after.get(name))
            for name in sorted(set(before) | set(after))
            if before.get(name) != after.get(name)
        ]
        return cls(tracking_ref_updates=updates)


@dataclass
class MergeResult:
    """Result of merging ``merged_ref`` into the current branch."""

    status: MergeStatus
    merged_ref: str
    orig_head: Optional[str] = None
    new_head: Optional[str] = None
    conflicts: list[str] = field(default_factory=list)
    message: str = ""


@dataclass
class PullResult:
    """
    Result of fetch + merge.

    ``ref_advertised`` is False when the remote does not have the branch
    being pulled; no merge is attempted in that case.
    """

    fetch_result: FetchResult
    merge_result: Optional[MergeResult] = None
    ref_advertised: bool = True

    @property
    def has_tracking_ref_updates(self) -> bool:
        return bool(self.fetch_result.tracking_ref_updates)


@dataclass
class BranchInfo:
    """A branch reference by full and short name."""

    full_name: str

    @property
    def short_name(self) -> str:
        for prefix in ("refs/heads/", "refs/remotes/"):
            if self.full_name.startswith(prefix):
                return self.full_name[len(prefix):]
        return self.full_name


@dataclass
class BranchStatus:
    """Snapshot of the current local branch and its remote-tracking branch."""

    current_local_branch: BranchInfo
    current_remote_branch: Optional[BranchInfo] = None


@dataclass
class RemoteRefUpdate:
    """A single ref update reported by a push."""

    src: str
    dst: str
    status: RefUpdateStatus
    message: str = ""

    @property
    def is_ok(self) -> bool:
        return self.status in (RefUpdateStatus.OK, RefUpdateStatus.UP_TO_DATE)

    def describe(self) -> str:
        text = f"{self.dst}: {self.status.value.replace('_', ' ')}"
        if self.message:
            text += f" ({self.message})"
        return text


@dataclass
class PushResult:
    """Result of pushing to one remote."""

    remote: str
    remote_updates: list[RemoteRefUpdate] = field(default_factory=list)
    messages: str = ""


_PUSH_FLAGS = {
    " ": RefUpdateStatus.OK,  # fast-forward
    "+": RefUpdateStatus.OK,  # forced update
    "-": RefUpdateStatus.OK,  # deleted
    "*": RefUpdateStatus.OK,  # new ref
    "=": RefUpdateStatus.UP_TO_DATE,
    "!": RefUpdateStatus.REJECTED,
}


def parse_push_porcelain(output: str) -> list[RemoteRefUpdate]:
    """
    Parse ``git push --porcelain`` output into ref updates.

    Each ref line has the form ``<flag>\\t<src>:<dst>\\t<summary>``; the
    ``To <url>`` and ``Done`` lines are skipped.
    """
    updates: list[RemoteRefUpdate] = []

    for line in output.splitlines():
        if len(line) < 2 or line[1] != "\t" or line[0] not in _PUSH_FLAGS:
            continue

        parts = line.split("\t")
        if len(parts) < 2:
            continue

        src, _, dst = parts[1].partition(":")
        summary = parts[2].strip() if len(parts) > 2 else ""
        status = _PUSH_FLAGS[line[0]]

        if status == RefUpdateStatus.REJECTED and "remote rejected" in summary:
            status = RefUpdateStatus.REMOTE_REJECTED

        # "[rejected] (non-fast-forward)" -> "non-fast-forward"
        message = summary
        if "(" in summary and summary.endswith(")"):
            message = summary[summary.index("(") + 1 : -1]
        elif summary.startswith("[") and summary.endswith("]"):
            message = summary[1:-1]

        updates.append(RemoteRefUpdate(src=src, dst=dst or src, status=status, message=message))

    return updates
