"""
[V5.0] 运行时配置的数据模型
"""
from dataclasses import dataclass
from typing import Optional
from config import GlobalConfig


@dataclass
class RunContext:
    """
    封装一次运行所需的所有配置和状态。
    这是从 CLI 传递到 Orchestrator 的唯一对象。
    """

    # --- 数据来源 (二选一) ---
    # 远程仓库 (owner/repo 或 URL)
    repo_path: Optional[str]
    # 已导出的提交 JSON 文件 (洞察请求体)
    input_path: Optional[str]

    # --- 范围参数 ---
    branch: str
    limit: int

    # --- 输出 ---
    output_dir: str
    dump_commits_path: Optional[str]

    # --- AI 参数 ---
    llm_id: str

    # --- 标志 ---
    no_ai: bool
    html: bool
    no_browser: bool

    # --- 全局配置 ---
    # 包含所有 API 密钥、常量和 .env 加载的数据
    global_config: GlobalConfig
