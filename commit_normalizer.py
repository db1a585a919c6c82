"""
[V5.0] 提交标准化
将源码托管 API 返回的原始提交 (列表项 + 详情 + Merge 对比) 转换为 NormalizedCommit。

- Merge 判定只看父提交数量 (>= 2)，与提交信息无关。
- Merge 来源查询失败时降级为 provenance=None，不影响提交本身的输出。
- additions/deletions 原样保留，patch 在此处不做截断 (截断只发生在构建提示词时)。
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

from errors import ProvenanceLookupError
from models import (
    CommitDetail,
    DirectDetail,
    FileChange,
    MergeDetail,
    MergeProvenance,
    NormalizedCommit,
)

logger = logging.getLogger(__name__)

# (base_sha, head_sha) -> 对比结果 (需提供 total_commits 与 files)
CompareLookup = Callable[[str, str], Any]

UNKNOWN_AUTHOR = "Unknown"


def is_merge_commit(parent_ids: Sequence[str]) -> bool:
    return len(parent_ids) >= 2


def resolve_author(raw_commit: Any) -> str:
    """解析顺序：关联账号 login -> 提交元数据中的作者名 -> "Unknown"。"""
    account = getattr(raw_commit, "author", None)
    login = getattr(account, "login", None) if account is not None else None
    if login:
        return login

    git_author = getattr(getattr(raw_commit, "commit", None), "author", None)
    name = getattr(git_author, "name", None) if git_author is not None else None
    return name or UNKNOWN_AUTHOR


def _resolve_timestamp(raw_commit: Any) -> str:
    git_author = getattr(getattr(raw_commit, "commit", None), "author", None)
    date = getattr(git_author, "date", None) if git_author is not None else None
    if isinstance(date, datetime):
        return date.isoformat()
    if date:
        return str(date)
    return datetime.now(timezone.utc).isoformat()


def file_change_from_api(api_file: Any) -> FileChange:
    """将 API 的文件对象 (PyGithub File) 转为 FileChange，计数原样保留"""
    return FileChange(
        filename=api_file.filename,
        status=api_file.status or "modified",
        additions=api_file.additions or 0,
        deletions=api_file.deletions or 0,
        patch=api_file.patch or "",
    )


def _lookup_provenance(
    sha: str, parent_ids: Sequence[str], compare: CompareLookup
) -> Optional[MergeProvenance]:
    if len(parent_ids) > 2:
        logger.info(
            f"ℹ️ 提交 {sha[:7]} 是 octopus merge ({len(parent_ids)} 个父提交)，仅对比前两个父提交。"
        )

    base_sha, head_sha = parent_ids[0], parent_ids[1]
    try:
        comparison = compare(base_sha, head_sha)
    except ProvenanceLookupError as e:
        logger.warning(f"⚠️ 获取 Merge 来源失败 ({sha[:7]}): {e}")
        return None

    return MergeProvenance(
        base_parent_id=base_sha,
        head_parent_id=head_sha,
        total_commits=comparison.total_commits or 0,
        changed_files=tuple(
            file_change_from_api(f) for f in (comparison.files or [])
        ),
    )


def normalize_commit(
    raw_commit: Any, detail: Any, compare: CompareLookup
) -> NormalizedCommit:
    """
    标准化单个提交。

    :param raw_commit: 提交列表中的原始提交 (sha, parents, author, commit.*)
    :param detail: 同一提交的详情查询结果 (files)；Merge 提交不使用，可为 None
    :param compare: Merge 父提交对比查询；失败时应抛出 ProvenanceLookupError
    """
    parent_ids = [p.sha for p in (raw_commit.parents or [])]

    commit_detail: CommitDetail
    if is_merge_commit(parent_ids):
        commit_detail = MergeDetail(
            provenance=_lookup_provenance(raw_commit.sha, parent_ids, compare)
        )
    else:
        commit_detail = DirectDetail(
            file_changes=tuple(file_change_from_api(f) for f in (detail.files or []))
        )

    return NormalizedCommit(
        id=raw_commit.sha,
        message=raw_commit.commit.message or "",
        author=resolve_author(raw_commit),
        timestamp=_resolve_timestamp(raw_commit),
        detail=commit_detail,
    )
