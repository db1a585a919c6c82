"""
[V5.0] 洞察流水线的异常类型

- InputValidationError: 提交批次缺失/格式错误/为空 (对应 HTTP 400)
- ProvenanceLookupError: Merge 父提交对比失败 (本地降级，不向调用方暴露)
- GenerationStageError: 某一阶段的 LLM 调用失败 (本地降级为占位文本)
- SourceControlError: 源码托管 API 的非降级失败 (请求级错误)
"""


class InsightError(Exception):
    """所有洞察相关异常的基类"""


class InputValidationError(InsightError):
    """提交批次无效，在任何处理开始之前抛出"""


class ProvenanceLookupError(InsightError):
    """Merge 提交的父提交对比查询失败"""


class GenerationStageError(InsightError):
    """单个流水线阶段的文本生成失败"""

    def __init__(self, stage: str, message: str):
        super().__init__(f"[{stage}] {message}")
        self.stage = stage


class SourceControlError(InsightError):
    """源码托管 API 调用失败 (列表/详情查询)"""
