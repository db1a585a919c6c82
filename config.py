"""
[V5.0] 全局配置
- 源码托管 (GitHub) 与 LLM 供应商的凭证均来自环境变量 / .env
- 提示词预算、阶段生成参数等常量集中在此
"""
import os
from dotenv import load_dotenv


# --- 脚本基础路径 ---
SCRIPT_BASE_PATH = os.path.abspath(os.path.dirname(__file__))
env_path = os.path.join(SCRIPT_BASE_PATH, ".env")
if os.path.exists(env_path):
    load_dotenv(env_path)
    print(f"✅ 已从脚本目录加载 .env: {env_path}")
else:
    load_dotenv()
    print("⚠️ 未在脚本目录找到 .env，尝试从 CWD 加载。")


class GlobalConfig:
    """
    RepoInsight 的全局应用配置。
    """

    # --- 路径配置 ---
    SCRIPT_BASE_PATH: str = SCRIPT_BASE_PATH
    OUTPUT_DIR_NAME: str = "reports"
    PROMPTS_DIR_NAME: str = "prompts"
    TEMPLATES_DIR_NAME: str = "templates"
    OUTPUT_FILENAME_PREFIX = "RepoInsight"

    # =================================================================
    # --- 源码托管 (GitHub) 配置 ---
    # =================================================================
    GITHUB_TOKEN: str = os.getenv("GITHUB_TOKEN", "")
    DEFAULT_BRANCH: str = "main"
    COMMITS_PER_PAGE: int = int(os.getenv("COMMITS_PER_PAGE", "20"))
    BRANCHES_PER_PAGE: int = 100
    # 与 GitHub 仓库列表接口的默认单页大小一致
    REPOS_PER_PAGE: int = 30
    # 每个提交的详情/对比查询并发上限 (与单页提交数一致)
    FETCH_MAX_WORKERS: int = 20

    # =================================================================
    # --- AI 供应商配置 ---
    # =================================================================

    # 1. 供应商 API 密钥
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    DEEPSEEK_API_KEY: str = os.getenv("DEEPSEEK_API_KEY", "")

    # 2. 供应商特定配置
    DEEPSEEK_BASE_URL: str = "https://api.deepseek.com"
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/v1")

    # 3. 应用程序默认值
    DEFAULT_LLM: str = os.getenv("DEFAULT_LLM", "openai").lower()

    # 4. 供应商的默认模型
    DEFAULT_MODEL_OPENAI: str = os.getenv("OPENAI_MODEL", "gpt-4o")
    DEFAULT_MODEL_GEMINI: str = "gemini-2.5-flash"
    DEFAULT_MODEL_DEEPSEEK: str = "deepseek-chat"
    DEFAULT_MODEL_OLLAMA: str = os.getenv("OLLAMA_MODEL", "qwen2.5:7b")

    # 5. 供应商配置验证辅助函数
    def is_provider_configured(self, provider: str) -> bool:
        """
        检查特定供应商是否已在环境中设置其 API 密钥。
        mock 与 ollama 不需要密钥。
        """
        if provider == "openai":
            return bool(self.OPENAI_API_KEY)
        if provider == "gemini":
            return bool(self.GEMINI_API_KEY)
        if provider == "deepseek":
            return bool(self.DEEPSEEK_API_KEY)
        if provider in ("mock", "ollama"):
            return True
        return False

    # =================================================================
    # --- 提示词预算 ---
    # =================================================================
    PROMPT_MAX_FILES_PER_COMMIT: int = 5
    PROMPT_PATCH_MAX_LINES: int = 20
    PROMPT_PATCHES_PER_COMMIT: int = 3
    STRUCTURE_SAMPLE_FILES: int = 50
    RECENT_COMMITS_SAMPLE: int = 5
    TOP_CONTRIBUTORS: int = 5
    # 终端展示用的 patch 行数预算
    DISPLAY_PATCH_MAX_LINES: int = 100

    # =================================================================
    # --- 各阶段生成参数 (temperature, max_tokens) ---
    # =================================================================
    STAGE_SETTINGS = {
        "direct_commits": {"temperature": 0.3, "max_tokens": 1000},
        "merge_commits": {"temperature": 0.3, "max_tokens": 1000},
        "project_structure": {"temperature": 0.3, "max_tokens": 800},
        "recommendations": {"temperature": 0.4, "max_tokens": 600},
    }
