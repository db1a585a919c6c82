"""
[V5.0] 洞察流水线
将标准化提交批次转换为一份多段落的可读报告 + 仓库统计。

阶段严格按顺序执行 (推荐阶段依赖之前各段的文本)：
  1. 统计前言 (纯格式化，不会失败)
  2. 直接提交分析 (存在带文件变更的直接提交时)
  3. Merge 提交分析 (存在 Merge 提交时)
  4. 项目结构分析
  5. 技术建议
任一阶段的 LLM 调用失败只会让该段落退化为固定占位文本，不会中断整个流水线。
"""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import prompt_builder
from ai_summarizer import AIService
from config import GlobalConfig
from errors import GenerationStageError, InputValidationError
from models import InsightResult, NormalizedCommit, ReportSection
from repo_stats import collect_filenames, summarize_repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    key: str
    title: str
    placeholder: str


DIRECT_COMMITS_STAGE = Stage(
    key="direct_commits",
    title="## ANÁLISE DETALHADA DE IMPLEMENTAÇÕES",
    placeholder="Não foi possível analisar os commits diretos devido a limitações técnicas.",
)
MERGE_COMMITS_STAGE = Stage(
    key="merge_commits",
    title="## ANÁLISE DE INTEGRAÇÕES (MERGES)",
    placeholder="Não foi possível analisar os commits de merge devido a limitações técnicas.",
)
PROJECT_STRUCTURE_STAGE = Stage(
    key="project_structure",
    title="## ANÁLISE TÉCNICA DO PROJETO",
    placeholder=(
        "Não foi possível gerar uma análise técnica completa do projeto "
        "devido a limitações técnicas."
    ),
)
RECOMMENDATIONS_STAGE = Stage(
    key="recommendations",
    title="## RECOMENDAÇÕES TÉCNICAS",
    placeholder=(
        "Não foi possível gerar recomendações técnicas específicas "
        "devido a limitações técnicas."
    ),
)


def validate_batch(commits: Any) -> List[NormalizedCommit]:
    """批次缺失、不是序列或为空时抛出 InputValidationError"""
    if commits is None:
        raise InputValidationError("缺少提交列表 (commits)")
    if not isinstance(commits, (list, tuple)):
        raise InputValidationError("commits 必须是数组")
    if len(commits) == 0:
        raise InputValidationError("提交列表为空")
    for index, commit in enumerate(commits):
        if not isinstance(commit, NormalizedCommit):
            raise InputValidationError(f"第 {index} 个提交无效")
    return list(commits)


class InsightPipeline:
    """
    按阶段编排提示词与 LLM 调用。
    """

    def __init__(
        self,
        ai_service: AIService,
        global_config: GlobalConfig,
        prompts: Optional[Dict[str, str]] = None,
    ):
        self.ai_service = ai_service
        self.global_config = global_config
        if prompts is None:
            prompts = prompt_builder.load_prompts(
                os.path.join(
                    global_config.SCRIPT_BASE_PATH, global_config.PROMPTS_DIR_NAME
                )
            )
        missing = [k for k in prompt_builder.REQUIRED_PROMPTS if k not in prompts]
        if missing:
            raise ValueError(f"缺少提示词模板: {missing}")
        self.prompts = prompts

    def _run_stage(self, stage: Stage, messages: List[Dict[str, str]]) -> ReportSection:
        settings = self.global_config.STAGE_SETTINGS[stage.key]
        try:
            body = self.ai_service.generate(
                stage.key,
                messages,
                temperature=settings["temperature"],
                max_tokens=settings["max_tokens"],
            )
        except GenerationStageError as e:
            logger.error(f"❌ 阶段 '{stage.key}' 生成失败，使用占位文本: {e}")
            return self._degraded(stage)
        return ReportSection(title=stage.title, body=body)

    @staticmethod
    def _degraded(stage: Stage) -> ReportSection:
        return ReportSection(title=stage.title, body=stage.placeholder, degraded=True)

    def run(self, commits: Sequence[NormalizedCommit]) -> InsightResult:
        commits = validate_batch(commits)
        cfg = self.global_config

        # 统计基于原始批次，截断只作用于提示词
        summary = summarize_repository(commits)
        prepared = prompt_builder.prepare_commits_for_prompt(
            commits,
            max_files=cfg.PROMPT_MAX_FILES_PER_COMMIT,
            patch_max_lines=cfg.PROMPT_PATCH_MAX_LINES,
        )

        direct_commits = [c for c in prepared if not c.is_merge and c.file_changes]
        merge_commits = [c for c in prepared if c.is_merge]

        sections: List[ReportSection] = [
            prompt_builder.build_statistics_preamble(summary, cfg.TOP_CONTRIBUTORS)
        ]

        if direct_commits:
            messages = prompt_builder.build_direct_commits_prompt(
                self.prompts, direct_commits, cfg.PROMPT_PATCHES_PER_COMMIT
            )
            sections.append(self._run_stage(DIRECT_COMMITS_STAGE, messages))

        if merge_commits:
            if any(c.merge_provenance is not None for c in merge_commits):
                messages = prompt_builder.build_merge_commits_prompt(
                    self.prompts, merge_commits, cfg.PROMPT_PATCHES_PER_COMMIT
                )
                sections.append(self._run_stage(MERGE_COMMITS_STAGE, messages))
            else:
                # 所有 Merge 的来源查询都失败了，没有可分析的内容
                logger.warning("⚠️ 所有 Merge 提交均缺少来源信息，跳过 Merge 分析。")
                sections.append(self._degraded(MERGE_COMMITS_STAGE))

        messages = prompt_builder.build_project_structure_prompt(
            self.prompts,
            prepared,
            collect_filenames(commits),
            sample_files=cfg.STRUCTURE_SAMPLE_FILES,
            recent_commits=cfg.RECENT_COMMITS_SAMPLE,
        )
        sections.append(self._run_stage(PROJECT_STRUCTURE_STAGE, messages))

        # 推荐阶段以之前所有段落的文本作为上下文
        analysis_so_far = "\n\n".join(s.render() for s in sections)
        messages = prompt_builder.build_recommendations_prompt(
            self.prompts, analysis_so_far
        )
        sections.append(self._run_stage(RECOMMENDATIONS_STAGE, messages))

        result = InsightResult(sections=tuple(sections), summary=summary)
        if result.degraded_sections:
            logger.warning(f"⚠️ 以下段落已降级: {result.degraded_sections}")
        logger.info(f"✅ 洞察报告生成完毕 ({len(sections)} 个段落)")
        return result
