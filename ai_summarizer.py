import logging
import os
import importlib
from typing import Dict, List, Optional

from config import GlobalConfig
from errors import GenerationStageError

# 导入 Registry 和基类
from llm.provider_abc import LLMProvider, PROVIDER_REGISTRY

logger = logging.getLogger(__name__)


# --- 动态加载器 ---
def load_providers_dynamically(script_base_path: str):
    """
    扫描 llm/ 目录下的所有 .py 文件并导入它们。
    这将触发 @register_provider 装饰器，将类注册到 PROVIDER_REGISTRY 中。
    """
    llm_dir = os.path.join(script_base_path, "llm")
    if not os.path.exists(llm_dir):
        logger.warning(f"⚠️ 未找到 llm 目录: {llm_dir}")
        return

    for filename in sorted(os.listdir(llm_dir)):
        if (
            filename.endswith(".py")
            and filename != "__init__.py"
            and filename != "provider_abc.py"
        ):
            # 构建模块名 (例如: llm.gemini_provider)
            module_name = f"llm.{filename[:-3]}"
            try:
                importlib.import_module(module_name)
            except Exception as e:
                logger.error(f"❌ 动态加载模块 {module_name} 失败: {e}")


# --- 工厂函数 ---
def get_llm_provider(provider_id: str, global_config: GlobalConfig) -> LLMProvider:
    """
    工厂函数：基于 Registry Pattern 实现，从 PROVIDER_REGISTRY 查找。
    """
    logger.info(f"ℹ️ 正在初始化 LLM 供应商: {provider_id}")

    # 1. 动态加载所有可能的 providers
    load_providers_dynamically(global_config.SCRIPT_BASE_PATH)

    # 2. 检查配置
    if not global_config.is_provider_configured(provider_id):
        logger.error(f"❌ 供应商 '{provider_id}' 未配置 API Key。")
        raise ValueError(
            f"供应商 '{provider_id}' 未配置。 "
            f"请在您的 .env 文件中设置相应的 API 密钥。"
        )

    # 3. 从注册表中查找
    if provider_id not in PROVIDER_REGISTRY:
        logger.error(f"❌ 未知的 LLM 供应商: '{provider_id}'")
        logger.error(f"   可用供应商: {list(PROVIDER_REGISTRY.keys())}")
        raise ValueError(f"未知的 LLM 供应商: {provider_id}")

    # 4. 实例化
    try:
        provider_class = PROVIDER_REGISTRY[provider_id]
        return provider_class(global_config)
    except ImportError as e:
        logger.error(f"❌ 供应商 '{provider_id}' 依赖缺失: {e}")
        raise
    except Exception as e:
        logger.error(f"❌ 实例化供应商 '{provider_id}' 失败: {e}")
        raise


class AIService:
    """
    封装所有对 LLM 的调用。
    - 由 GlobalConfig + 供应商 ID 初始化 (也可直接注入 provider)。
    - 任何供应商异常都会被转换为 GenerationStageError，交由流水线按阶段降级。
    """

    def __init__(
        self,
        global_config: GlobalConfig,
        llm_id: Optional[str] = None,
        provider: Optional[LLMProvider] = None,
        model: Optional[str] = None,
    ):
        self.global_config = global_config
        self.model = model
        if provider is None:
            provider = get_llm_provider(
                llm_id or global_config.DEFAULT_LLM, global_config
            )
        self.provider: LLMProvider = provider
        logger.info(
            f"✅ 🤖 AI 服务已成功初始化 (Provider: {self.provider.__class__.__name__})"
        )

    def generate(
        self,
        stage: str,
        messages: List[Dict[str, str]],
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        prompt_chars = sum(len(m["content"]) for m in messages)
        logger.info(f"🤖 [{stage}] 正在调用 LLM (提示词 {prompt_chars} 字符)...")
        try:
            text = self.provider.complete(
                messages,
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            raise GenerationStageError(stage, str(e) or e.__class__.__name__) from e

        if not text or not text.strip():
            raise GenerationStageError(stage, "LLM 返回了空内容")
        logger.info(f"✅ [{stage}] 生成完成 ({len(text)} 字符)")
        return text
