import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from ai_summarizer import AIService
from config import GlobalConfig
from context import RunContext
from models import NormalizedCommit
from orchestrator import InsightOrchestrator
from sample_data import RecordingProvider, make_direct, make_file, make_merge


class OrchestratorTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.config = GlobalConfig()
        self.commits = [
            make_direct("a1", "alice", [make_file("src/a.py", 5, 1)]),
            make_merge("m1", "bob", [make_file("src/b.py", 2, 0)]),
        ]

    def tearDown(self):
        self._tmp.cleanup()

    def _context(self, **overrides):
        values = dict(
            repo_path=None,
            input_path=None,
            branch="main",
            limit=10,
            output_dir=os.path.join(self.tmp, "reports"),
            dump_commits_path=None,
            llm_id="mock",
            no_ai=False,
            html=False,
            no_browser=True,
            global_config=self.config,
        )
        values.update(overrides)
        return RunContext(**values)

    def _write_input(self):
        path = os.path.join(self.tmp, "commits.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"commits": [c.to_dict() for c in self.commits]}, f)
        return path

    def _saved(self, extension):
        folder = os.path.join(self.tmp, "reports")
        return [n for n in os.listdir(folder) if n.endswith(extension)]


class TestInsightOrchestrator(OrchestratorTestCase):

    @patch("builtins.print")
    def test_no_ai_run_from_input_file(self, _print):
        context = self._context(input_path=self._write_input(), no_ai=True)
        result = InsightOrchestrator(context).run()

        self.assertEqual(len(result.sections), 1)
        self.assertEqual(result.summary.commit_count, 2)
        self.assertEqual(len(self._saved(".md")), 1)

    @patch("builtins.print")
    def test_full_run_with_data_source_and_dump(self, _print):
        source = MagicMock()
        source.validate.return_value = True
        source.fetch_normalized_commits.return_value = self.commits
        dump_path = os.path.join(self.tmp, "dump.json")
        provider = RecordingProvider()

        context = self._context(repo_path="octo/shop", dump_commits_path=dump_path)
        result = InsightOrchestrator(
            context,
            data_source=source,
            ai_service=AIService(self.config, provider=provider),
        ).run()

        source.fetch_normalized_commits.assert_called_once_with("main", 10)
        self.assertEqual(len(result.sections), 5)
        self.assertEqual(len(provider.calls), 4)

        with open(dump_path, encoding="utf-8") as f:
            dumped = json.load(f)
        self.assertEqual(
            [NormalizedCommit.from_dict(c) for c in dumped["commits"]], self.commits
        )

    @patch("utils.open_report_in_browser")
    @patch("builtins.print")
    def test_html_export(self, _print, open_browser):
        context = self._context(input_path=self._write_input(), no_ai=True, html=True)
        InsightOrchestrator(context).run()

        self.assertEqual(len(self._saved(".html")), 1)
        open_browser.assert_not_called()

    @patch("builtins.print")
    def test_unconfigured_provider_falls_back_to_statistics(self, _print):
        self.config.OPENAI_API_KEY = ""
        context = self._context(input_path=self._write_input(), llm_id="openai")
        result = InsightOrchestrator(context).run()

        self.assertTrue(context.no_ai)
        self.assertEqual(len(result.sections), 1)

    def test_invalid_source_returns_none(self):
        source = MagicMock()
        source.validate.return_value = False
        context = self._context(repo_path="octo/shop")
        self.assertIsNone(InsightOrchestrator(context, data_source=source).run())


if __name__ == "__main__":
    unittest.main()
