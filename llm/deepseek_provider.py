"""
[V5.0] LLMProvider 针对 DeepSeek 的具体实现 (OpenAI 兼容)。
"""
import logging

from openai import OpenAI

from llm.provider_abc import register_provider
from llm.openai_provider import OpenAICompatibleProvider
from config import GlobalConfig

logger = logging.getLogger(__name__)


@register_provider("deepseek")
class DeepSeekProvider(OpenAICompatibleProvider):
    """
    DeepSeek 策略实现 (OpenAI 兼容)。
    """

    name = "DeepSeek"

    def __init__(self, global_config: GlobalConfig):
        self.global_config = global_config
        if not self.global_config.DEEPSEEK_API_KEY:
            logger.error("❌ DEEPSEEK_API_KEY 未设置。请检查您的 .env 文件。")
            raise ValueError("DEEPSEEK_API_KEY 未设置。")

        try:
            client = OpenAI(
                api_key=self.global_config.DEEPSEEK_API_KEY,
                base_url=self.global_config.DEEPSEEK_BASE_URL,
            )
        except Exception as e:
            logger.error(f"❌ DeepSeek (OpenAI) 客户端初始化失败: {e}")
            raise ValueError(f"DeepSeek (OpenAI) 客户端初始化失败: {e}")

        super().__init__(client, self.global_config.DEFAULT_MODEL_DEEPSEEK)
        logger.info(f"✅ DeepSeekProvider 初始化成功 (模型: {self.default_model})")
