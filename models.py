"""
[V5.0] 洞察流水线的数据模型
所有实体都是请求级的：创建后不可变，响应生成后即丢弃，从不持久化。
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from errors import InputValidationError


def _non_negative_int(value: Any, field_name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InputValidationError(f"'{field_name}' 必须是非负整数，实际为: {value!r}")
    return value


def _optional_str(value: Any, field_name: str, default: str, allow_empty: bool = True) -> str:
    """缺失 (None) 时返回默认值；存在但不是字符串时抛出 InputValidationError"""
    if value is None:
        return default
    if not isinstance(value, str) or (not allow_empty and not value):
        raise InputValidationError(f"'{field_name}' 必须是非空字符串，实际为: {value!r}")
    return value or default


@dataclass(frozen=True)
class FileChange:
    """单个文件的变更 (来自提交详情或两个父提交的对比)"""

    filename: str
    status: str
    additions: int
    deletions: int
    patch: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "FileChange":
        if not isinstance(data, dict):
            raise InputValidationError(f"文件变更必须是对象，实际为: {type(data).__name__}")
        filename = data.get("filename")
        if not isinstance(filename, str) or not filename:
            raise InputValidationError("文件变更缺少 'filename'")
        return cls(
            filename=filename,
            status=_optional_str(data.get("status"), "status", "modified"),
            additions=_non_negative_int(data.get("additions"), "additions"),
            deletions=_non_negative_int(data.get("deletions"), "deletions"),
            patch=_optional_str(data.get("patch"), "patch", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "status": self.status,
            "additions": self.additions,
            "deletions": self.deletions,
            "patch": self.patch,
        }


@dataclass(frozen=True)
class MergeProvenance:
    """Merge 提交的来源：前两个父提交之间的对比结果"""

    base_parent_id: str
    head_parent_id: str
    total_commits: int
    changed_files: Tuple[FileChange, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "MergeProvenance":
        if not isinstance(data, dict):
            raise InputValidationError("'mergeDetails' 必须是对象或 null")
        changed = data.get("changedFiles") or []
        if not isinstance(changed, list):
            raise InputValidationError("'mergeDetails.changedFiles' 必须是数组")
        return cls(
            base_parent_id=str(data.get("baseSha") or ""),
            head_parent_id=str(data.get("headSha") or ""),
            total_commits=_non_negative_int(data.get("totalCommits"), "totalCommits"),
            changed_files=tuple(FileChange.from_dict(f) for f in changed),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseSha": self.base_parent_id,
            "headSha": self.head_parent_id,
            "totalCommits": self.total_commits,
            "changedFiles": [f.to_dict() for f in self.changed_files],
        }


@dataclass(frozen=True)
class DirectDetail:
    """普通提交：文件变更直接来自提交详情"""

    file_changes: Tuple[FileChange, ...] = ()


@dataclass(frozen=True)
class MergeDetail:
    """Merge 提交：来源查询失败时 provenance 为 None"""

    provenance: Optional[MergeProvenance] = None


CommitDetail = Union[DirectDetail, MergeDetail]


@dataclass(frozen=True)
class NormalizedCommit:
    """流水线处理的标准提交单元"""

    id: str
    message: str
    author: str
    timestamp: str
    detail: CommitDetail

    @property
    def is_merge(self) -> bool:
        return isinstance(self.detail, MergeDetail)

    @property
    def title(self) -> str:
        """提交信息的首行 (用于展示)"""
        return self.message.split("\n")[0]

    @property
    def file_changes(self) -> Tuple[FileChange, ...]:
        if isinstance(self.detail, DirectDetail):
            return self.detail.file_changes
        return ()

    @property
    def merge_provenance(self) -> Optional[MergeProvenance]:
        if isinstance(self.detail, MergeDetail):
            return self.detail.provenance
        return None

    @property
    def primary_files(self) -> Tuple[FileChange, ...]:
        """主要的文件级数据来源：普通提交取 file_changes，Merge 取对比结果"""
        if isinstance(self.detail, DirectDetail):
            return self.detail.file_changes
        if self.detail.provenance is not None:
            return self.detail.provenance.changed_files
        return ()

    @property
    def filenames(self) -> Tuple[str, ...]:
        seen: List[str] = []
        for change in self.primary_files:
            if change.filename not in seen:
                seen.append(change.filename)
        return tuple(seen)

    @property
    def touched_filenames(self) -> FrozenSet[str]:
        return frozenset(self.filenames)

    @classmethod
    def from_dict(cls, data: Any) -> "NormalizedCommit":
        """
        从 JSON 线格式解析提交。
        若带有 'parents' 列表，则以父提交数量判定是否为 Merge (>= 2)；
        否则使用上游给出的 'isMergeCommit'。
        """
        if not isinstance(data, dict):
            raise InputValidationError(f"提交必须是对象，实际为: {type(data).__name__}")

        sha = data.get("sha") or data.get("id")
        if not isinstance(sha, str) or not sha:
            raise InputValidationError("提交缺少 'sha'")

        parents = data.get("parents")
        if isinstance(parents, list):
            is_merge = len(parents) >= 2
        else:
            is_merge = bool(data.get("isMergeCommit"))

        detail: CommitDetail
        if is_merge:
            merge_data = data.get("mergeDetails")
            provenance = MergeProvenance.from_dict(merge_data) if merge_data else None
            detail = MergeDetail(provenance=provenance)
        else:
            file_details = data.get("fileDetails") or []
            if not isinstance(file_details, list):
                raise InputValidationError("'fileDetails' 必须是数组")
            detail = DirectDetail(
                file_changes=tuple(FileChange.from_dict(f) for f in file_details)
            )

        return cls(
            id=sha,
            message=str(data.get("message") or ""),
            author=_optional_str(data.get("author"), "author", "Unknown", allow_empty=False),
            timestamp=_optional_str(
                data.get("date"), "date", datetime.now(timezone.utc).isoformat()
            ),
            detail=detail,
        )

    def to_dict(self) -> Dict[str, Any]:
        provenance = self.merge_provenance
        return {
            "sha": self.id,
            "message": self.message,
            "author": self.author,
            "date": self.timestamp,
            "isMergeCommit": self.is_merge,
            "mergeDetails": provenance.to_dict() if provenance else None,
            "fileDetails": [f.to_dict() for f in self.file_changes],
            "files": list(self.filenames),
        }


@dataclass(frozen=True)
class ContributorStats:
    """单个作者在一个批次中的汇总"""

    name: str
    total_commits: int = 0
    direct_commits: int = 0
    merge_commits: int = 0
    additions: int = 0
    deletions: int = 0
    files_changed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "totalCommits": self.total_commits,
            "directCommits": self.direct_commits,
            "mergeCommits": self.merge_commits,
            "additions": self.additions,
            "deletions": self.deletions,
            "filesChanged": self.files_changed,
        }


@dataclass(frozen=True)
class RepositorySummary:
    """整个批次的仓库级统计"""

    commit_count: int
    direct_commit_count: int
    merge_commit_count: int
    total_files: int
    total_additions: int
    total_deletions: int
    contributors: Tuple[ContributorStats, ...] = ()

    def top_contributors(self, limit: int = 5) -> Tuple[ContributorStats, ...]:
        return self.contributors[:limit]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commits": self.commit_count,
            "directCommits": self.direct_commit_count,
            "mergeCommits": self.merge_commit_count,
            "totalFiles": self.total_files,
            "totalAdditions": self.total_additions,
            "totalDeletions": self.total_deletions,
            "contributors": [c.to_dict() for c in self.contributors],
        }


@dataclass(frozen=True)
class ReportSection:
    """报告中的一个带标题的段落 (每个流水线阶段产出一个)"""

    title: str
    body: str
    degraded: bool = False

    def render(self) -> str:
        return f"{self.title}\n\n{self.body.strip()}"


@dataclass(frozen=True)
class InsightResult:
    """流水线输出：按阶段顺序排列的段落 + 仓库统计"""

    sections: Tuple[ReportSection, ...]
    summary: RepositorySummary
    generated_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def insight_text(self) -> str:
        return "\n\n".join(section.render() for section in self.sections) + "\n"

    @property
    def degraded_sections(self) -> List[str]:
        return [s.title for s in self.sections if s.degraded]
