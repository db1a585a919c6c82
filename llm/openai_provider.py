"""
[V5.0] LLMProvider 针对 OpenAI Chat Completions 的具体实现。
"""
import logging
from typing import Dict, List, Optional

from openai import OpenAI

from llm.provider_abc import LLMProvider, register_provider
from config import GlobalConfig

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(LLMProvider):
    """
    OpenAI 兼容接口的公共实现 (OpenAI / DeepSeek / Ollama 共用)。
    子类只需提供客户端与默认模型。
    """

    name: str = "OpenAI"

    def __init__(self, client: OpenAI, default_model: str):
        self.client = client
        self.default_model = default_model

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        model_to_use = model or self.default_model
        try:
            response = self.client.chat.completions.create(
                model=model_to_use,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            logger.error(f"❌ [{self.name}] 生成内容失败: {e}")
            raise

        if response.choices and response.choices[0].message.content:
            return response.choices[0].message.content.strip()
        raise ValueError(f"未从 {self.name} API 收到内容")


@register_provider("openai")
class OpenAIProvider(OpenAICompatibleProvider):
    """OpenAI 官方接口 (默认 gpt-4o)"""

    name = "OpenAI"

    def __init__(self, global_config: GlobalConfig):
        self.global_config = global_config
        if not self.global_config.OPENAI_API_KEY:
            logger.error("❌ OPENAI_API_KEY 未设置。请检查您的 .env 文件。")
            raise ValueError("OPENAI_API_KEY 未设置。")

        try:
            client = OpenAI(api_key=self.global_config.OPENAI_API_KEY)
        except Exception as e:
            logger.error(f"❌ OpenAI 客户端初始化失败: {e}")
            raise ValueError(f"OpenAI 客户端初始化失败: {e}")

        super().__init__(client, self.global_config.DEFAULT_MODEL_OPENAI)
        logger.info(f"✅ OpenAIProvider 初始化成功 (模型: {self.default_model})")
