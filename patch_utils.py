"""
[V5.0] Patch 截断工具
将任意长度的 unified diff 文本限制在固定行数预算内，保留首尾上下文。
"""
from typing import Optional


def truncate_patch(patch: Optional[str], max_lines: int = 20) -> str:
    """
    行数不超过预算时原样返回；否则保留前 max_lines // 2 行与后 max_lines // 2 行，
    中间插入省略标记 (说明省略了多少行)。

    奇数预算按每半向下取整。空 patch 返回空字符串，不带标记。
    """
    if not patch:
        return ""

    lines = patch.split("\n")
    if len(lines) <= max_lines:
        return patch

    half = max(max_lines, 0) // 2
    head = lines[:half]
    tail = lines[len(lines) - half :] if half else []
    omitted = len(lines) - len(head) - len(tail)

    return (
        "\n".join(head)
        + f"\n\n... [{omitted} linhas omitidas] ...\n\n"
        + "\n".join(tail)
    )
