"""
[V5.0] 面向 UI 层的洞察请求契约

输入: JSON 文档 {"commits": [...]} (或直接是提交数组)，提交为线格式 (见 models.NormalizedCommit.from_dict)
输出:
  - 200 {"success": true, "insight": "...", "stats": {...}}
  - 400 {"error": "invalid_commits", "message": "..."}            输入无效，未做任何处理
  - 500 {"error": "insight_generation_failed", "message": "..."}  其它意外错误
"""
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from ai_summarizer import AIService
from config import GlobalConfig
from errors import InputValidationError
from insight_pipeline import InsightPipeline, validate_batch
from models import NormalizedCommit

logger = logging.getLogger(__name__)

Response = Tuple[int, Dict[str, Any]]


def parse_commit_batch(payload: Any) -> List[NormalizedCommit]:
    """解析并校验请求体；任何问题都以 InputValidationError 抛出"""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise InputValidationError(f"请求体不是合法的 JSON: {e}")

    if isinstance(payload, dict):
        raw_commits = payload.get("commits")
    else:
        raw_commits = payload

    if raw_commits is None:
        raise InputValidationError("缺少提交列表 (commits)")
    if not isinstance(raw_commits, list):
        raise InputValidationError("commits 必须是数组")
    if not raw_commits:
        raise InputValidationError("提交列表为空")

    return validate_batch([NormalizedCommit.from_dict(c) for c in raw_commits])


def handle_insight_request(
    payload: Any,
    global_config: GlobalConfig,
    ai_service: Optional[AIService] = None,
    pipeline: Optional[InsightPipeline] = None,
) -> Response:
    try:
        commits = parse_commit_batch(payload)
    except InputValidationError as e:
        logger.warning(f"⚠️ 洞察请求被拒绝: {e}")
        return 400, {"error": "invalid_commits", "message": str(e)}

    try:
        if pipeline is None:
            if ai_service is None:
                ai_service = AIService(global_config)
            pipeline = InsightPipeline(ai_service, global_config)
        result = pipeline.run(commits)
    except InputValidationError as e:
        return 400, {"error": "invalid_commits", "message": str(e)}
    except Exception as e:
        logger.error(f"❌ 生成洞察时发生意外错误: {e}", exc_info=True)
        return 500, {"error": "insight_generation_failed", "message": str(e)}

    return 200, {
        "success": True,
        "insight": result.insight_text,
        "stats": result.summary.to_dict(),
    }
