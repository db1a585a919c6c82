"""
[V5.0] 业务逻辑编排器
获取提交 -> 统计 -> 洞察流水线 -> 保存报告
"""
import json
import logging
from typing import List, Optional

import prompt_builder
import report_builder
import utils
from ai_summarizer import AIService
from context import RunContext
from data_sources.base import SourceControlDataSource
from data_sources.factory import get_data_source
from insight_api import parse_commit_batch
from insight_pipeline import InsightPipeline
from models import InsightResult, NormalizedCommit
from repo_stats import summarize_repository

logger = logging.getLogger(__name__)


class InsightOrchestrator:
    """
    负责执行报告生成的核心业务逻辑。
    """

    def __init__(
        self,
        context: RunContext,
        data_source: Optional[SourceControlDataSource] = None,
        ai_service: Optional[AIService] = None,
    ):
        self.context = context
        self.global_config = context.global_config
        self.data_source = data_source
        self.ai_service = ai_service

        if self.data_source is None and context.repo_path and not context.input_path:
            self.data_source = get_data_source(context)

        logger.info("✅ InsightOrchestrator 已初始化")

    # --- 1. 获取提交 ---

    def load_commits(self) -> List[NormalizedCommit]:
        if self.context.input_path:
            logger.info(f"📂 从文件读取提交: {self.context.input_path}")
            with open(self.context.input_path, "r", encoding="utf-8") as f:
                payload = json.load(f)
            return parse_commit_batch(payload)

        if self.data_source is None:
            raise ValueError("必须提供仓库 (-r) 或提交文件 (-i) 之一")

        if not self.data_source.validate():
            logger.error("❌ 数据源验证失败，终止运行。")
            return []
        return self.data_source.fetch_normalized_commits(
            self.context.branch, self.context.limit
        )

    def dump_commits(self, commits: List[NormalizedCommit], path: str):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                {"commits": [c.to_dict() for c in commits]},
                f,
                ensure_ascii=False,
                indent=2,
            )
        logger.info(f"✅ 已导出 {len(commits)} 个提交: {path}")

    # --- 2. AI 服务 ---

    def _init_ai_service(self) -> Optional[AIService]:
        if self.context.no_ai:
            return None
        if self.ai_service is not None:
            return self.ai_service
        try:
            return AIService(self.global_config, self.context.llm_id)
        except (ValueError, ImportError) as e:
            logger.error(f"❌ AI 服务初始化失败: {e}")
            logger.error("   将以 --no-ai 模式继续 (仅输出统计)...")
            self.context.no_ai = True
            return None

    def run(self) -> Optional[InsightResult]:
        """
        执行核心业务流程。
        """
        commits = self.load_commits()
        if not commits:
            logger.error("❌ 未获取到提交记录")
            return None

        if self.context.dump_commits_path:
            self.dump_commits(commits, self.context.dump_commits_path)

        # --- 文本报告 (终端) ---
        summary = summarize_repository(commits)
        print(
            report_builder.generate_text_report(
                commits, summary, self.global_config.DISPLAY_PATCH_MAX_LINES
            )
        )

        # --- 洞察流水线 ---
        ai_service = self._init_ai_service()
        if ai_service is not None:
            logger.info("🤖 正在启动洞察流水线...")
            result = InsightPipeline(ai_service, self.global_config).run(commits)
        else:
            preamble = prompt_builder.build_statistics_preamble(
                summary, self.global_config.TOP_CONTRIBUTORS
            )
            result = InsightResult(sections=(preamble,), summary=summary)

        # --- 保存报告 ---
        prefix = self.global_config.OUTPUT_FILENAME_PREFIX
        report_builder.save_report(
            result.insight_text, self.context.output_dir, prefix, "md"
        )

        if self.context.html:
            repo_name = self.context.repo_path or self.context.input_path
            html_content = report_builder.generate_html_report(
                result, repo_name, self.global_config
            )
            html_path = report_builder.save_report(
                html_content, self.context.output_dir, prefix, "html"
            )
            if html_path and not self.context.no_browser:
                utils.open_report_in_browser(html_path)

        return result
