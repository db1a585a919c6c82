"""
[V5.0] LLMProvider 针对 Google Gemini 的具体实现。
system 消息映射为 system_instruction，其余消息映射为 contents。
"""
import logging
from typing import Dict, List, Optional

from google import genai
from google.genai import types

from llm.provider_abc import LLMProvider, register_provider
from config import GlobalConfig

logger = logging.getLogger(__name__)


@register_provider("gemini")
class GeminiProvider(LLMProvider):
    """
    Gemini 策略实现。
    """

    def __init__(self, global_config: GlobalConfig):
        """
        初始化 Gemini 客户端 (genai.Client)。
        """
        self.global_config = global_config
        if not self.global_config.GEMINI_API_KEY:
            logger.error("❌ GEMINI_API_KEY 未设置。请检查您的 .env 文件。")
            raise ValueError("GEMINI_API_KEY 未设置。")

        try:
            self.client = genai.Client(api_key=self.global_config.GEMINI_API_KEY)
            self.default_model = self.global_config.DEFAULT_MODEL_GEMINI
            logger.info("✅ GeminiProvider (genai.Client 模式) 初始化成功")
        except Exception as e:
            logger.error(f"❌ Gemini (genai.Client) 客户端初始化失败: {e}")
            raise ValueError(f"Gemini (genai.Client) 客户端初始化失败: {e}")

    @staticmethod
    def _split_messages(messages: List[Dict[str, str]]):
        system_parts = [m["content"] for m in messages if m["role"] == "system"]
        contents = [
            types.Content(
                role="model" if m["role"] == "assistant" else "user",
                parts=[types.Part(text=m["content"])],
            )
            for m in messages
            if m["role"] != "system"
        ]
        return ("\n\n".join(system_parts) or None), contents

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        system_instruction, contents = self._split_messages(messages)
        model_to_use = model or self.default_model
        try:
            response = self.client.models.generate_content(
                model=f"models/{model_to_use}",
                contents=contents,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                    max_output_tokens=max_tokens,
                ),
            )
        except Exception as e:
            logger.error(f"❌ [GeminiProvider 错误] 生成内容失败: {e}")
            raise

        if not response or not response.text:
            raise ValueError("API 调用成功，但回复内容为空")
        return response.text.strip()
