import logging
from concurrent.futures import ThreadPoolExecutor
from itertools import islice
from typing import Any, List, Optional
from urllib.parse import urlparse

from github import Auth, Github, GithubException
from github.Repository import Repository

from .base import SourceControlDataSource
from commit_normalizer import is_merge_commit, normalize_commit
from config import GlobalConfig
from errors import ProvenanceLookupError, SourceControlError
from models import NormalizedCommit

logger = logging.getLogger(__name__)


class GitHubAPIDataSource(SourceControlDataSource):
    """
    [V5.0] GitHub 远程数据源实现
    使用 PyGithub 访问远程仓库：分支、提交列表、提交详情与父提交对比。
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        repo_path: str,
        client: Optional[Github] = None,
    ):
        self.global_config = global_config
        self.repo_path = repo_path
        self.repo: Optional[Repository] = None

        if client is not None:
            self.client = client
            return

        # 初始化 GitHub 客户端
        token = self.global_config.GITHUB_TOKEN
        if not token:
            logger.warning(
                "⚠️ 未配置 GITHUB_TOKEN，API 请求可能会受到严格限制 (60次/小时)。建议在 .env 中配置。"
            )
            self.client = Github(per_page=self.global_config.COMMITS_PER_PAGE)
        else:
            self.client = Github(
                auth=Auth.Token(token), per_page=self.global_config.COMMITS_PER_PAGE
            )

    @staticmethod
    def parse_repo_name(url: str) -> Optional[str]:
        """从 URL 或 owner/repo 中解析仓库全名"""
        # 支持 owner/repo、https://github.com/owner/repo 和 git@github.com:owner/repo.git
        if not url:
            return None
        if url.startswith("git@"):
            if ":" not in url:
                return None
            path = url.split(":", 1)[1]
        else:
            path = urlparse(url).path if "://" in url else url
        path = path.strip("/")
        if path.endswith(".git"):
            path = path[:-4]
        parts = path.split("/")
        if len(parts) != 2 or not all(parts):
            return None
        return path

    def validate(self) -> bool:
        repo_name = self.parse_repo_name(self.repo_path)
        if not repo_name:
            logger.error(f"❌ 无法从 URL 解析仓库名称: {self.repo_path}")
            return False

        try:
            logger.info(f"🌐 正在连接 GitHub API: {repo_name} ...")
            self.repo = self.client.get_repo(repo_name)
            logger.info(f"✅ 成功连接远程仓库: {self.repo.full_name}")
            return True
        except GithubException as e:
            message = e.data.get("message", "") if isinstance(e.data, dict) else ""
            logger.error(f"❌ 无法访问 GitHub 仓库: {e.status} {message}")
            return False

    def _require_repo(self) -> Repository:
        if self.repo is None and not self.validate():
            raise SourceControlError(f"无法访问仓库: {self.repo_path}")
        return self.repo

    def list_repositories(self) -> List[str]:
        """当前凭证所属用户可访问的仓库，不需要预先指定仓库"""
        if not self.global_config.GITHUB_TOKEN:
            logger.warning("⚠️ 列出仓库需要 GITHUB_TOKEN，未认证的请求将被拒绝。")
        try:
            repos = islice(
                self.client.get_user().get_repos(), self.global_config.REPOS_PER_PAGE
            )
            return [r.full_name for r in repos]
        except GithubException as e:
            raise SourceControlError(f"获取仓库列表失败: {e}") from e

    def list_branches(self) -> List[str]:
        repo = self._require_repo()
        try:
            branches = islice(repo.get_branches(), self.global_config.BRANCHES_PER_PAGE)
            return [b.name for b in branches]
        except GithubException as e:
            raise SourceControlError(f"获取分支列表失败: {e}") from e

    def list_commits(self, branch: str, limit: int) -> List[Any]:
        repo = self._require_repo()
        logger.info(f"📅 获取分支 '{branch}' 上最近 {limit} 个提交...")
        try:
            return list(islice(repo.get_commits(sha=branch), limit))
        except GithubException as e:
            raise SourceControlError(f"获取提交列表失败 ({branch}): {e}") from e

    def get_commit_detail(self, sha: str) -> Any:
        repo = self._require_repo()
        try:
            return repo.get_commit(sha)
        except GithubException as e:
            raise SourceControlError(f"获取提交详情失败 ({sha[:7]}): {e}") from e

    def compare(self, base: str, head: str) -> Any:
        repo = self._require_repo()
        try:
            return repo.compare(base, head)
        except Exception as e:
            raise ProvenanceLookupError(
                f"对比 {base[:7]}...{head[:7]} 失败: {e}"
            ) from e

    def _normalize_one(self, raw_commit: Any) -> NormalizedCommit:
        # Merge 的文件数据来自父提交对比，不需要详情查询
        parent_ids = [p.sha for p in (raw_commit.parents or [])]
        detail = None
        if not is_merge_commit(parent_ids):
            detail = self.get_commit_detail(raw_commit.sha)
        return normalize_commit(raw_commit, detail, self.compare)

    def fetch_normalized_commits(self, branch: str, limit: int) -> List[NormalizedCommit]:
        """
        每个提交的详情/对比查询互相独立，并发执行；
        executor.map 按输入顺序返回结果，任一详情查询失败都会在此处抛出。
        """
        raw_commits = self.list_commits(branch, limit)
        if not raw_commits:
            return []

        max_workers = min(self.global_config.FETCH_MAX_WORKERS, len(raw_commits))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            commits = list(executor.map(self._normalize_one, raw_commits))

        merges = sum(1 for c in commits if c.is_merge)
        logger.info(f"✅ 已标准化 {len(commits)} 个提交 (其中 {merges} 个 merge)")
        return commits
