import os
import tempfile
import unittest

import report_builder
from config import GlobalConfig
from models import InsightResult, ReportSection
from repo_stats import summarize_repository
from sample_data import make_direct, make_file, make_merge


class TestTextReport(unittest.TestCase):

    def setUp(self):
        self.commits = [
            make_direct(
                "a1b2c3d4e5",
                "alice",
                [make_file("src/a.py", 3, 1, patch="\n".join(f"+{i}" for i in range(50)))],
                message="feat: a\n\ncorpo",
            ),
            make_merge("m1m2m3m4", "bob", [make_file("src/b.py", 2, 0)], total_commits=6),
            make_merge("m9m9m9m9", "bob", files=None),
        ]
        self.summary = summarize_repository(self.commits)

    def test_lists_commits_and_contributors(self):
        text = report_builder.generate_text_report(self.commits, self.summary)

        self.assertIn("* a1b2c3d [commit] feat: a - alice", text)
        self.assertIn("[merge]", text)
        self.assertIn("合并了 6 个提交", text)
        self.assertIn("(来源信息不可用)", text)
        self.assertIn("alice (1 个文件)", text)
        self.assertNotIn("+49", text)

    def test_patches_use_display_budget(self):
        text = report_builder.generate_text_report(self.commits, self.summary, display_patch_lines=10)
        self.assertIn("+49", text)
        self.assertIn("[40 linhas omitidas]", text)

    def test_empty_commit_list(self):
        text = report_builder.generate_text_report([], summarize_repository([]))
        self.assertIn("未找到提交记录", text)


class TestHtmlReport(unittest.TestCase):

    def test_renders_insight_markdown_and_stats(self):
        commits = [make_direct("a1", "alice", [make_file("a.py", 4, 0)])]
        result = InsightResult(
            sections=(
                ReportSection(title="## RECOMENDAÇÕES TÉCNICAS", body="- usar **cache**"),
                ReportSection(title="## ANÁLISE TÉCNICA DO PROJETO", body="indisponível", degraded=True),
            ),
            summary=summarize_repository(commits),
        )

        html = report_builder.generate_html_report(result, "octo/<shop>", GlobalConfig())

        self.assertIn("<strong>cache</strong>", html)
        self.assertIn("RepoInsight - octo/&lt;shop&gt;", html)
        self.assertIn("Seções indisponíveis: ## ANÁLISE TÉCNICA DO PROJETO", html)
        self.assertIn("<td>alice</td>", html)


class TestSaveReport(unittest.TestCase):

    def test_writes_file_with_prefix(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = os.path.join(tmp, "nested")
            path = report_builder.save_report("conteúdo", target, "RepoInsight", "md")

            self.assertTrue(os.path.basename(path).startswith("RepoInsight_"))
            self.assertTrue(path.endswith(".md"))
            with open(path, encoding="utf-8") as f:
                self.assertEqual(f.read(), "conteúdo")


if __name__ == "__main__":
    unittest.main()
