"""
[V5.0] 报告生成器
- 纯文本报告 (终端输出)：统计、贡献者、提交列表
- HTML 报告：洞察 Markdown 经 markdown 转换后交给 Jinja2 模板渲染
"""
import logging
import os
from datetime import datetime
from typing import List, Optional, Sequence

import markdown
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import GlobalConfig
from models import InsightResult, NormalizedCommit, RepositorySummary
from patch_utils import truncate_patch

logger = logging.getLogger(__name__)


def _format_commit(commit: NormalizedCommit, display_patch_lines: int) -> List[str]:
    kind = "merge" if commit.is_merge else "commit"
    lines = [f"* {commit.id[:7]} [{kind}] {commit.title} - {commit.author} ({commit.timestamp})"]

    if commit.is_merge:
        provenance = commit.merge_provenance
        if provenance is None:
            lines.append("    (来源信息不可用)")
            return lines
        lines.append(
            f"    {provenance.base_parent_id[:7]} <- {provenance.head_parent_id[:7]}, "
            f"合并了 {provenance.total_commits} 个提交"
        )

    for change in commit.primary_files:
        lines.append(
            f"    +{change.additions:<5} -{change.deletions:<5} {change.status:<9} {change.filename}"
        )
        if display_patch_lines and change.patch:
            patch = truncate_patch(change.patch, display_patch_lines)
            lines.extend(f"        {line}" for line in patch.split("\n"))
    return lines


def generate_text_report(
    commits: Sequence[NormalizedCommit],
    summary: RepositorySummary,
    display_patch_lines: int = 0,
) -> str:
    """
    生成纯文本格式的报告 (用于终端输出)。
    display_patch_lines > 0 时附带按展示预算截断的 patch。
    """
    lines = [
        "=" * 80,
        "                            仓库提交汇总",
        "=" * 80,
        f"生成时间: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"提交数量: {summary.commit_count} "
        f"(直接 {summary.direct_commit_count}, merge {summary.merge_commit_count})",
        f"代码变更: +{summary.total_additions} -{summary.total_deletions} "
        f"(涉及文件: {summary.total_files})",
        "",
    ]

    if summary.contributors:
        lines.append(f" {'提交':<6} | {'直接':<6} | {'merge':<6} | {'新增':<7} | {'删除':<7} | 作者")
        lines.append("-" * 80)
        for c in summary.contributors:
            lines.append(
                f" {c.total_commits:<8} | {c.direct_commits:<8} | {c.merge_commits:<7} | "
                f"+{c.additions:<8} | -{c.deletions:<8} | {c.name} ({c.files_changed} 个文件)"
            )
        lines.append("")

    if not commits:
        lines.append("⚠️  未找到提交记录")
    else:
        lines.append("=" * 80)
        lines.append("                            提交列表")
        lines.append("=" * 80)
        for commit in commits:
            lines.extend(_format_commit(commit, display_patch_lines))
    lines.append("=" * 80)
    return "\n".join(lines)


def generate_html_report(
    result: InsightResult,
    repo_name: str,
    global_config: GlobalConfig,
) -> str:
    """
    使用 Jinja2 模板引擎生成 HTML 报告。
    """
    # 1. 准备模板环境
    templates_dir = os.path.join(
        global_config.SCRIPT_BASE_PATH, global_config.TEMPLATES_DIR_NAME
    )
    env = Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )

    # 2. 预处理 Markdown 洞察文本
    insight_html = markdown.markdown(
        result.insight_text, extensions=["fenced_code", "tables", "sane_lists", "nl2br"]
    )

    # 3. 组装上下文
    template_context = {
        "title": f"RepoInsight - {repo_name}",
        "generation_time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "insight_html": insight_html,
        "stats": result.summary,
        "degraded_sections": result.degraded_sections,
    }

    template_name = "report.html.j2"
    template = env.get_template(template_name)
    logger.info(f"🎨 正在渲染 Jinja2 模板: {template_name}")
    return template.render(**template_context)


def save_report(
    content: str, output_dir: str, prefix: str, extension: str
) -> Optional[str]:
    """保存报告到文件，失败时返回 None"""
    filename = f"{prefix}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{extension}"
    full_path = os.path.join(output_dir, filename)

    try:
        os.makedirs(output_dir, exist_ok=True)
        with open(full_path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.info(f"✅ 报告已保存: {full_path}")
        return full_path
    except OSError as e:
        logger.error(f"❌ 保存报告失败 ({full_path}): {e}")
        return None
