"""
[V5.0] 提示词构建
负责把标准化后的提交批次与统计结果格式化为各阶段的提示词 (消息列表)。
提示词模板位于 prompts/*.txt，使用 str.format 填充。
"""
import json
import logging
import os
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Sequence

from models import (
    DirectDetail,
    FileChange,
    MergeDetail,
    NormalizedCommit,
    ReportSection,
    RepositorySummary,
)
from patch_utils import truncate_patch

logger = logging.getLogger(__name__)

REQUIRED_PROMPTS = (
    "direct_commits",
    "merge_commits",
    "project_structure",
    "recommendations",
    "system_recommendations",
)

STATISTICS_TITLE = "--- ESTATÍSTICAS DO REPOSITÓRIO ---"


def load_prompts(prompt_dir: str) -> Dict[str, str]:
    """递归加载目录下所有 .txt 模板，key 为相对路径 (不含扩展名)"""
    prompts = {}
    try:
        for root, _, files in os.walk(prompt_dir):
            for filename in files:
                if filename.endswith(".txt"):
                    file_path = os.path.join(root, filename)
                    relative_path = os.path.relpath(file_path, prompt_dir)
                    key = os.path.splitext(relative_path)[0].replace(os.path.sep, "/")
                    with open(file_path, "r", encoding="utf-8") as f:
                        prompts[key] = f.read()
    except OSError as e:
        logger.error(f"❌ 加载提示词失败 ({prompt_dir}): {e}")
        return {}

    if not prompts:
        logger.warning(f"⚠️ 在 {prompt_dir} 及其子目录中未找到 .txt 提示词。")
    return prompts


# --- 预处理 ---


def _limit_files(
    files: Sequence[FileChange], max_files: int, patch_max_lines: int
) -> tuple:
    return tuple(
        replace(f, patch=truncate_patch(f.patch, patch_max_lines))
        for f in files[:max_files]
    )


def prepare_commits_for_prompt(
    commits: Sequence[NormalizedCommit],
    max_files: int = 5,
    patch_max_lines: int = 20,
) -> List[NormalizedCommit]:
    """
    每个提交最多保留 max_files 个文件 (多余的直接丢弃)，并截断每个 patch。
    只用于构建提示词；统计必须基于原始批次。
    """
    prepared = []
    for commit in commits:
        detail = commit.detail
        if isinstance(detail, MergeDetail):
            if detail.provenance is not None:
                detail = MergeDetail(
                    provenance=replace(
                        detail.provenance,
                        changed_files=_limit_files(
                            detail.provenance.changed_files, max_files, patch_max_lines
                        ),
                    )
                )
        else:
            detail = DirectDetail(
                file_changes=_limit_files(
                    detail.file_changes, max_files, patch_max_lines
                )
            )
        prepared.append(replace(commit, detail=detail))
    return prepared


# --- 格式化辅助 ---


def format_date(timestamp: str) -> str:
    """ISO 时间戳 -> dd/mm/aaaa (无法解析时原样返回)"""
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime(
            "%d/%m/%Y"
        )
    except (ValueError, AttributeError):
        return str(timestamp)


def _format_file_list(files: Sequence[FileChange]) -> str:
    return "\n".join(
        f"- {f.filename} ({f.status}, +{f.additions}, -{f.deletions})" for f in files
    )


def _format_patches(files: Sequence[FileChange], max_patches: int) -> str:
    blocks = [
        f"MUDANÇAS EM {f.filename}:\n{f.patch}\n"
        for f in files[:max_patches]
        if f.patch
    ]
    text = "\n".join(blocks)
    if len(files) > max_patches:
        text += f"\n... e mais {len(files) - max_patches} arquivos alterados"
    return text


def build_statistics_preamble(
    summary: RepositorySummary, top_n: int = 5
) -> ReportSection:
    """阶段 1：纯格式化，不调用模型"""
    lines = [
        f"Total de commits analisados: {summary.commit_count}",
        f"Commits diretos: {summary.direct_commit_count}",
        f"Merges: {summary.merge_commit_count}",
        f"Arquivos alterados: {summary.total_files}",
        f"Linhas adicionadas: {summary.total_additions}",
        f"Linhas removidas: {summary.total_deletions}",
        "",
        "Principais Contribuidores:",
    ]
    for contributor in summary.top_contributors(top_n):
        lines.append(
            f"- {contributor.name}: {contributor.total_commits} commits "
            f"({contributor.direct_commits} diretos, {contributor.merge_commits} merges)"
        )
    return ReportSection(title=STATISTICS_TITLE, body="\n".join(lines))


# --- 阶段提示词 ---


def build_direct_commits_prompt(
    prompts: Dict[str, str],
    commits: Sequence[NormalizedCommit],
    max_patches: int = 3,
) -> List[Dict[str, str]]:
    blocks = []
    for c in commits:
        files = c.file_changes
        blocks.append(
            f"COMMIT: {c.message}\n"
            f"AUTOR: {c.author}\n"
            f"DATA: {format_date(c.timestamp)}\n"
            f"ARQUIVOS ALTERADOS:\n{_format_file_list(files)}\n\n"
            f"{_format_patches(files, max_patches)}"
        )
    content = prompts["direct_commits"].format(commits_block="\n---\n".join(blocks))
    return [{"role": "user", "content": content}]


def build_merge_commits_prompt(
    prompts: Dict[str, str],
    commits: Sequence[NormalizedCommit],
    max_patches: int = 3,
) -> List[Dict[str, str]]:
    blocks = []
    for c in commits:
        provenance = c.merge_provenance
        if provenance is None:
            total = "Desconhecido"
            parents = "Desconhecido"
            file_list = "Informação não disponível"
            patches = ""
        else:
            total = str(provenance.total_commits)
            parents = f"{provenance.base_parent_id} <- {provenance.head_parent_id}"
            file_list = (
                _format_file_list(provenance.changed_files)
                or "Informação não disponível"
            )
            patches = _format_patches(provenance.changed_files, max_patches)
        blocks.append(
            f"COMMIT DE MERGE: {c.message}\n"
            f"AUTOR: {c.author}\n"
            f"DATA: {format_date(c.timestamp)}\n"
            f"PAIS (BASE <- HEAD): {parents}\n"
            f"TOTAL DE COMMITS MESCLADOS: {total}\n\n"
            f"ARQUIVOS ALTERADOS NA MESCLAGEM:\n{file_list}\n\n"
            f"{patches}"
        )
    content = prompts["merge_commits"].format(commits_block="\n---\n".join(blocks))
    return [{"role": "user", "content": content}]


def build_folder_tree(filenames: Sequence[str]) -> Dict[str, Any]:
    """由文件路径重建嵌套的目录树 (只包含目录，不含文件本身)"""
    tree: Dict[str, Any] = {}
    for filename in filenames:
        current = tree
        for part in filename.split("/")[:-1]:
            current = current.setdefault(part, {})
    return tree


def build_project_structure_prompt(
    prompts: Dict[str, str],
    commits: Sequence[NormalizedCommit],
    filenames: Sequence[str],
    sample_files: int = 50,
    recent_commits: int = 5,
) -> List[Dict[str, str]]:
    more_files = ""
    if len(filenames) > sample_files:
        more_files = f"\n\n... e mais {len(filenames) - sample_files} arquivos"

    recent = "\n".join(
        f"- {c.title} (por {c.author})" for c in commits[:recent_commits]
    )
    content = prompts["project_structure"].format(
        folder_structure=json.dumps(
            build_folder_tree(filenames), indent=2, ensure_ascii=False
        ),
        files_list="\n".join(filenames[:sample_files]),
        more_files=more_files,
        recent_commits=recent,
    )
    return [{"role": "user", "content": content}]


def build_recommendations_prompt(
    prompts: Dict[str, str], analysis_so_far: str
) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": prompts["system_recommendations"].strip()},
        {
            "role": "user",
            "content": prompts["recommendations"].format(
                analysis_so_far=analysis_so_far
            ),
        },
    ]
