"""
[测试样例] 一个模拟的 LLM 供应商
不进行任何实际 API 调用，用于离线运行与测试流水线。
"""
import logging
from typing import Dict, List, Optional

from llm.provider_abc import LLMProvider, register_provider
from config import GlobalConfig

logger = logging.getLogger(__name__)


@register_provider("mock")
class MockProvider(LLMProvider):
    """
    模拟的 Provider，仅返回固定格式的字符串，并记录收到的调用。
    """

    default_model = "mock-model"

    def __init__(self, global_config: GlobalConfig):
        self.global_config = global_config
        self.calls: List[Dict] = []
        logger.info("✅ MockProvider 已初始化 (无需 API Key)")

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        self.calls.append(
            {
                "messages": messages,
                "model": model or self.default_model,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        user_prompt = messages[-1]["content"] if messages else ""
        return (
            f"[Mock] Análise gerada ({len(user_prompt)} caracteres de contexto, "
            f"temperature={temperature}, max_tokens={max_tokens})"
        )
