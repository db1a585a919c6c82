"""
[V5.0] 提交统计
- analyze_contributors: 按作者聚合 (提交数、增删行数、涉及的不同文件数)
- summarize_repository: 仓库级汇总 + 贡献者排行
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Set

from models import (
    ContributorStats,
    DirectDetail,
    MergeDetail,
    NormalizedCommit,
    RepositorySummary,
)

logger = logging.getLogger(__name__)


@dataclass
class _ContributorTally:
    """单个作者的累加器 (零值条目)"""

    direct_commits: int = 0
    merge_commits: int = 0
    additions: int = 0
    deletions: int = 0
    files: Set[str] = field(default_factory=set)

    def freeze(self, name: str) -> ContributorStats:
        return ContributorStats(
            name=name,
            total_commits=self.direct_commits + self.merge_commits,
            direct_commits=self.direct_commits,
            merge_commits=self.merge_commits,
            additions=self.additions,
            deletions=self.deletions,
            files_changed=len(self.files),
        )


def analyze_contributors(commits: Sequence[NormalizedCommit]) -> List[ContributorStats]:
    """
    按作者折叠提交批次，结果按 totalCommits 降序 (相同时保持首次出现顺序)。
    没有来源信息的 Merge 只计入 mergeCommits，不贡献文件级数据。
    """
    tallies: Dict[str, _ContributorTally] = {}

    for commit in commits:
        tally = tallies.setdefault(commit.author or "Unknown", _ContributorTally())

        detail = commit.detail
        if isinstance(detail, MergeDetail):
            tally.merge_commits += 1
            changes = detail.provenance.changed_files if detail.provenance else ()
        elif isinstance(detail, DirectDetail):
            tally.direct_commits += 1
            changes = detail.file_changes
        else:
            raise TypeError(f"未知的提交详情类型: {type(detail).__name__}")

        for change in changes:
            tally.additions += change.additions
            tally.deletions += change.deletions
            tally.files.add(change.filename)

    contributors = [tally.freeze(name) for name, tally in tallies.items()]
    # sorted() 是稳定排序
    return sorted(contributors, key=lambda c: c.total_commits, reverse=True)


def collect_filenames(commits: Iterable[NormalizedCommit]) -> List[str]:
    """所有出现过的文件名 (普通提交的变更 + Merge 对比的变更)，按首次出现排序去重"""
    seen: Dict[str, None] = {}
    for commit in commits:
        for filename in commit.filenames:
            seen.setdefault(filename, None)
    return list(seen)


def summarize_repository(commits: Sequence[NormalizedCommit]) -> RepositorySummary:
    """
    仓库级汇总。
    注意：totalAdditions/totalDeletions 只累加普通提交的文件变更，
    Merge 对比带来的行数只计入贡献者统计。
    """
    direct = [c for c in commits if not c.is_merge]
    merges = [c for c in commits if c.is_merge]

    total_additions = sum(f.additions for c in direct for f in c.file_changes)
    total_deletions = sum(f.deletions for c in direct for f in c.file_changes)

    summary = RepositorySummary(
        commit_count=len(commits),
        direct_commit_count=len(direct),
        merge_commit_count=len(merges),
        total_files=len(collect_filenames(commits)),
        total_additions=total_additions,
        total_deletions=total_deletions,
        contributors=tuple(analyze_contributors(commits)),
    )
    logger.info(
        f"📊 统计完成: {summary.commit_count} 个提交 "
        f"({summary.direct_commit_count} 直接, {summary.merge_commit_count} merge), "
        f"{summary.total_files} 个文件, +{total_additions} -{total_deletions}"
    )
    return summary
