from abc import ABC, abstractmethod
from typing import Any, List
from models import NormalizedCommit


class SourceControlDataSource(ABC):
    """
    [V5.0] 源码托管数据源抽象基类
    定义获取分支、提交、提交详情与提交对比的标准接口。
    """

    @abstractmethod
    def validate(self) -> bool:
        """
        验证数据源是否可用 (仓库可访问、凭证有效)。
        """
        pass

    @abstractmethod
    def list_repositories(self) -> List[str]:
        """列出当前凭证可访问的仓库 (owner/repo)"""
        pass

    @abstractmethod
    def list_branches(self) -> List[str]:
        """列出仓库的分支名"""
        pass

    @abstractmethod
    def list_commits(self, branch: str, limit: int) -> List[Any]:
        """
        列出分支上最近的提交 (最新在前，最多 limit 个)。
        返回原始提交对象 (需提供 sha / parents / author / commit)。
        """
        pass

    @abstractmethod
    def get_commit_detail(self, sha: str) -> Any:
        """
        获取单个提交的完整详情 (files: filename/status/additions/deletions/patch)。
        失败时抛出 SourceControlError。
        """
        pass

    @abstractmethod
    def compare(self, base: str, head: str) -> Any:
        """
        对比两个提交 (total_commits, files)。
        失败时抛出 ProvenanceLookupError。
        """
        pass

    @abstractmethod
    def fetch_normalized_commits(self, branch: str, limit: int) -> List[NormalizedCommit]:
        """
        获取并标准化分支上最近的提交，顺序与列表顺序一致。
        """
        pass
