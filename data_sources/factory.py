import logging
from config import GlobalConfig
from context import RunContext
from .base import SourceControlDataSource
from .github_api import GitHubAPIDataSource

logger = logging.getLogger(__name__)


def get_data_source(context: RunContext) -> SourceControlDataSource:
    """
    数据源工厂
    目前仅支持 GitHub (owner/repo、https URL 或 git@ 地址)。
    """
    path = context.repo_path
    if GitHubAPIDataSource.parse_repo_name(path) is None:
        raise ValueError(f"不支持的仓库地址: {path} (期望 owner/repo 或 GitHub URL)")

    logger.info("🔌 [Factory] 初始化数据源: GitHub API")
    return GitHubAPIDataSource(context.global_config, path)


def get_account_data_source(global_config: GlobalConfig) -> SourceControlDataSource:
    """不绑定具体仓库的数据源 (用于列出当前凭证可访问的仓库)"""
    logger.info("🔌 [Factory] 初始化账号级数据源: GitHub API")
    return GitHubAPIDataSource(global_config, repo_path="")
