"""
[V5.0] 所有 LLM 供应商的抽象基类 (ABC)。
新增 Registry Pattern 支持，允许动态注册供应商。
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

# --- 注册表机制 START ---
# 全局注册表，存储 "provider_id" -> Provider Class 的映射
PROVIDER_REGISTRY: Dict[str, Type["LLMProvider"]] = {}


def register_provider(provider_id: str):
    """
    类装饰器：用于将具体的 Provider 实现类注册到全局注册表中。

    使用示例:
        @register_provider("openai")
        class OpenAIProvider(LLMProvider):
            ...
    """

    def decorator(cls):
        if provider_id in PROVIDER_REGISTRY:
            raise ValueError(
                f"Provider id '{provider_id}' 已经被注册过 ({PROVIDER_REGISTRY[provider_id].__name__})"
            )
        PROVIDER_REGISTRY[provider_id] = cls
        return cls

    return decorator


# --- 注册表机制 END ---


class LLMProvider(ABC):
    """
    LLM 供应商的抽象接口：提交带角色的消息列表，返回单条补全文本。
    """

    default_model: str = ""

    @abstractmethod
    def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ) -> str:
        """
        :param messages: [{"role": "system" | "user", "content": ...}, ...]
        :return: 补全文本；失败 (网络、配额、空回复) 时抛出异常
        """
        pass
