# llm/ollama_provider.py
import logging

# 复用 openai 库，因为 Ollama 兼容 OpenAI 的接口格式
from openai import OpenAI

from llm.provider_abc import register_provider
from llm.openai_provider import OpenAICompatibleProvider
from config import GlobalConfig

logger = logging.getLogger(__name__)


@register_provider("ollama")
class OllamaProvider(OpenAICompatibleProvider):
    """
    Ollama 本地大模型策略实现。
    通过 OpenAI 兼容接口连接本地 Ollama 服务。
    """

    name = "Ollama"

    def __init__(self, global_config: GlobalConfig):
        self.global_config = global_config
        self.base_url = self.global_config.OLLAMA_BASE_URL

        try:
            client = OpenAI(
                base_url=self.base_url,
                api_key="ollama",  # Ollama 不需要真实 Key，但库要求必填
            )
        except Exception as e:
            logger.error(f"❌ Ollama 客户端初始化失败: {e}")
            raise ValueError(f"Ollama 客户端初始化失败: {e}")

        super().__init__(client, self.global_config.DEFAULT_MODEL_OLLAMA)
        logger.info(
            f"✅ OllamaProvider 初始化成功 (模型: {self.default_model}, 地址: {self.base_url})"
        )
