"""
测试用的样例数据与假的协作方 (LLM 供应商、GitHub 对象)。
"""
from types import SimpleNamespace
from typing import Callable, Dict, List, Optional

from llm.provider_abc import LLMProvider
from models import (
    DirectDetail,
    FileChange,
    MergeDetail,
    MergeProvenance,
    NormalizedCommit,
)


def make_file(filename, additions=1, deletions=0, patch="@@ -1 +1 @@\n-a\n+b", status="modified"):
    return FileChange(
        filename=filename,
        status=status,
        additions=additions,
        deletions=deletions,
        patch=patch,
    )


def make_direct(sha, author="alice", files=(), message="feat: update", date="2024-05-01T10:00:00Z"):
    return NormalizedCommit(
        id=sha,
        message=message,
        author=author,
        timestamp=date,
        detail=DirectDetail(file_changes=tuple(files)),
    )


def make_merge(sha, author="bob", files=None, total_commits=2, message="Merge pull request #1", date="2024-05-02T10:00:00Z"):
    provenance = None
    if files is not None:
        provenance = MergeProvenance(
            base_parent_id=f"{sha}-base",
            head_parent_id=f"{sha}-head",
            total_commits=total_commits,
            changed_files=tuple(files),
        )
    return NormalizedCommit(
        id=sha,
        message=message,
        author=author,
        timestamp=date,
        detail=MergeDetail(provenance=provenance),
    )


class RecordingProvider(LLMProvider):
    """记录每次调用；fail_when(messages) 为真时抛出异常"""

    default_model = "fake-model"

    def __init__(self, fail_when: Optional[Callable[[List[Dict[str, str]]], bool]] = None):
        self.calls: List[Dict] = []
        self.fail_when = fail_when

    def complete(self, messages, model=None, temperature=0.3, max_tokens=1000):
        self.calls.append(
            {
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.fail_when and self.fail_when(messages):
            raise RuntimeError("quota exceeded")
        return f"resposta {len(self.calls)}"

    def user_prompt(self, index: int) -> str:
        return self.calls[index]["messages"][-1]["content"]


def fake_api_file(filename, additions=1, deletions=0, patch="+x", status="modified"):
    return SimpleNamespace(
        filename=filename,
        status=status,
        additions=additions,
        deletions=deletions,
        patch=patch,
    )


def fake_raw_commit(sha, parents=(), login="alice", name="Alice", message="feat: x", date=None):
    git_author = SimpleNamespace(name=name, date=date) if (name or date) else None
    return SimpleNamespace(
        sha=sha,
        parents=[SimpleNamespace(sha=p) for p in parents],
        author=SimpleNamespace(login=login) if login else None,
        commit=SimpleNamespace(message=message, author=git_author),
    )
