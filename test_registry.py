# test_registry.py
import unittest
from unittest.mock import MagicMock, patch

# 导入核心模块
from config import GlobalConfig
from ai_summarizer import AIService, get_llm_provider, load_providers_dynamically
from errors import GenerationStageError
from llm.provider_abc import PROVIDER_REGISTRY, register_provider
from sample_data import RecordingProvider


class TestRegistry(unittest.TestCase):

    def setUp(self):
        self.config = GlobalConfig()

    def test_dynamic_discovery(self):
        """扫描 llm/ 目录后，所有内置供应商都应被注册"""
        load_providers_dynamically(self.config.SCRIPT_BASE_PATH)

        for provider_id in ("mock", "openai", "deepseek", "gemini", "ollama"):
            self.assertIn(provider_id, PROVIDER_REGISTRY, f"❌ '{provider_id}' 未被自动注册！")

    def test_repeated_discovery_is_harmless(self):
        load_providers_dynamically(self.config.SCRIPT_BASE_PATH)
        before = dict(PROVIDER_REGISTRY)
        load_providers_dynamically(self.config.SCRIPT_BASE_PATH)
        self.assertEqual(PROVIDER_REGISTRY, before)

    def test_duplicate_id_rejected(self):
        load_providers_dynamically(self.config.SCRIPT_BASE_PATH)
        with self.assertRaises(ValueError):
            register_provider("mock")(RecordingProvider)

    def test_instantiation(self):
        """MockProvider 不需要 API Key"""
        provider = get_llm_provider("mock", self.config)
        text = provider.complete([{"role": "user", "content": "print('hello')"}])

        self.assertTrue(text.startswith("[Mock]"), "❌ MockProvider 返回内容不符合预期")
        self.assertEqual(len(provider.calls), 1)

    def test_unconfigured_provider(self):
        self.config.OPENAI_API_KEY = ""
        with self.assertRaises(ValueError):
            get_llm_provider("openai", self.config)

    def test_unknown_provider(self):
        with self.assertRaises(ValueError):
            get_llm_provider("no-such-llm", self.config)

    def test_openai_compatible_provider_calls_chat_completions(self):
        load_providers_dynamically(self.config.SCRIPT_BASE_PATH)
        self.config.DEEPSEEK_API_KEY = "sk-test"

        fake_client = MagicMock()
        fake_client.chat.completions.create.return_value.choices = [
            MagicMock(message=MagicMock(content="análise"))
        ]
        with patch("llm.deepseek_provider.OpenAI", return_value=fake_client):
            provider = get_llm_provider("deepseek", self.config)
            text = provider.complete([{"role": "user", "content": "oi"}], max_tokens=10)

        self.assertEqual(text, "análise")
        kwargs = fake_client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "deepseek-chat")
        self.assertEqual(kwargs["max_tokens"], 10)


class TestAIService(unittest.TestCase):

    def setUp(self):
        self.config = GlobalConfig()

    def test_provider_errors_become_stage_errors(self):
        service = AIService(self.config, provider=RecordingProvider(fail_when=lambda m: True))
        with self.assertRaises(GenerationStageError) as ctx:
            service.generate("direct_commits", [{"role": "user", "content": "x"}])
        self.assertEqual(ctx.exception.stage, "direct_commits")
        self.assertIn("quota exceeded", str(ctx.exception))

    def test_returns_provider_text(self):
        provider = RecordingProvider()
        service = AIService(self.config, provider=provider)
        text = service.generate("recommendations", [{"role": "user", "content": "x"}], 0.4, 600)

        self.assertEqual(text, "resposta 1")
        self.assertEqual(provider.calls[0]["temperature"], 0.4)

    def test_builds_provider_from_id(self):
        service = AIService(self.config, llm_id="mock")
        self.assertEqual(service.provider.__class__.__name__, "MockProvider")


if __name__ == "__main__":
    unittest.main()
