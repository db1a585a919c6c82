"""
[V5.0] 命令行界面 (Interface) 层
"""
import argparse
import json
import logging
import os
import sys

from ai_summarizer import AIService
from config import GlobalConfig
from context import RunContext
from data_sources.factory import get_account_data_source, get_data_source
from insight_api import handle_insight_request
from orchestrator import InsightOrchestrator

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """
    负责所有 argparse 的定义。
    """
    parser = argparse.ArgumentParser(
        description="RepoInsight - 基于 AI 的仓库提交洞察报告",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    source_group = parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument(
        "-r",
        "--repo",
        type=str,
        help="GitHub 仓库 (owner/repo、https URL 或 git@ 地址)。",
    )
    source_group.add_argument(
        "-i",
        "--input",
        type=str,
        help="已导出的提交 JSON 文件 ({\"commits\": [...]})，\n"
        "按洞察请求契约处理并输出 JSON 响应。",
    )
    source_group.add_argument(
        "--list-repos",
        action="store_true",
        help="仅列出当前 GITHUB_TOKEN 可访问的仓库。",
    )

    parser.add_argument(
        "-b",
        "--branch",
        type=str,
        default=None,
        help="要分析的分支。\n(默认: main)",
    )
    parser.add_argument(
        "-n",
        "--number",
        type=int,
        default=None,
        help="获取最近 N 个提交。\n(默认: 20)",
    )
    parser.add_argument(
        "--list-branches",
        action="store_true",
        help="仅列出仓库的分支 (需要 -r)。",
    )
    parser.add_argument(
        "--dump-commits",
        type=str,
        default=None,
        help="将标准化后的提交导出为 JSON 文件 (可作为 -i 的输入)。",
    )
    parser.add_argument(
        "--llm",
        type=str,
        default=None,
        help="指定要使用的 LLM 供应商 (例如 'openai', 'deepseek', 'gemini', 'ollama', 'mock')。\n"
        "(默认: .env 中的 DEFAULT_LLM)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default=None,
        help="报告输出目录。\n(默认: <脚本目录>/reports)",
    )

    # --- 标志 (Flags) ---
    parser.add_argument("--no-ai", action="store_true", help="禁用 AI 分析，仅输出统计")
    parser.add_argument("--html", action="store_true", help="额外生成 HTML 报告")
    parser.add_argument(
        "--no-browser", action="store_true", help="不自动在浏览器中打开 HTML 报告"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")

    return parser


def build_context(args: argparse.Namespace, global_config: GlobalConfig) -> RunContext:
    output_dir = args.output_dir or os.path.join(
        global_config.SCRIPT_BASE_PATH, global_config.OUTPUT_DIR_NAME
    )
    return RunContext(
        repo_path=args.repo,
        input_path=args.input,
        branch=args.branch or global_config.DEFAULT_BRANCH,
        limit=args.number or global_config.COMMITS_PER_PAGE,
        output_dir=output_dir,
        dump_commits_path=args.dump_commits,
        llm_id=(args.llm or global_config.DEFAULT_LLM).lower(),
        no_ai=args.no_ai,
        html=args.html,
        no_browser=args.no_browser,
        global_config=global_config,
    )


def run_insight_request(context: RunContext) -> int:
    """按洞察请求契约处理 JSON 文件，打印 JSON 响应，返回退出码"""
    with open(context.input_path, "r", encoding="utf-8") as f:
        raw = f.read()

    try:
        ai_service = AIService(context.global_config, context.llm_id)
    except (ValueError, ImportError) as e:
        logger.error(f"❌ AI 服务初始化失败: {e}")
        status, body = 500, {"error": "insight_generation_failed", "message": str(e)}
    else:
        status, body = handle_insight_request(
            raw, context.global_config, ai_service=ai_service
        )

    print(json.dumps(body, ensure_ascii=False, indent=2))
    return 0 if status == 200 else 1


def run_cli():
    """
    主入口点。
    """

    # 1. 解析 Args
    parser = setup_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # 2. 加载 GlobalConfig 并组装 RunContext
    global_config = GlobalConfig()
    run_context = build_context(args, global_config)

    # 3. 特殊模式：--list-repos / --list-branches
    if args.list_repos:
        data_source = get_account_data_source(global_config)
        for name in data_source.list_repositories():
            print(name)
        sys.exit(0)

    if args.list_branches:
        if not args.repo:
            logger.error("❌ --list-branches 需要 -r / --repo 指定目标仓库。")
            sys.exit(1)
        data_source = get_data_source(run_context)
        for name in data_source.list_branches():
            print(name)
        sys.exit(0)

    # 4. 特殊模式：-i 且未要求 HTML/统计 -> 直接走请求契约
    if args.input and not args.html and not args.no_ai:
        sys.exit(run_insight_request(run_context))

    logger.info("=" * 50)
    logger.info("🚀 RepoInsight 启动...")
    logger.info(f"   [目标仓库]: {run_context.repo_path or run_context.input_path}")
    logger.info(f"   [分支]: {run_context.branch} (最近 {run_context.limit} 个提交)")
    logger.info(f"   [LLM 供应商]: {'已禁用' if run_context.no_ai else run_context.llm_id}")
    logger.info("=" * 50)

    # 5. 运行 Orchestrator
    orchestrator = InsightOrchestrator(run_context)
    result = orchestrator.run()
    if result is None:
        sys.exit(1)
    logger.info("✅ Orchestrator 运行完毕。")
