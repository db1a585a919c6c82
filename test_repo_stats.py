import unittest

from repo_stats import analyze_contributors, collect_filenames, summarize_repository
from sample_data import make_direct, make_file, make_merge


class TestAnalyzeContributors(unittest.TestCase):

    def test_counts_add_up(self):
        commits = [
            make_direct("a1", "alice", [make_file("src/a.py", 10, 2), make_file("src/b.py", 1, 1)]),
            make_direct("a2", "alice", [make_file("src/a.py", 5, 0)]),
            make_merge("m1", "alice", [make_file("src/c.py", 7, 3)]),
            make_direct("b1", "bob", [make_file("README.md", 1, 0)]),
        ]
        stats = analyze_contributors(commits)

        self.assertEqual([c.name for c in stats], ["alice", "bob"])
        alice = stats[0]
        self.assertEqual(alice.total_commits, 3)
        self.assertEqual(alice.direct_commits, 2)
        self.assertEqual(alice.merge_commits, 1)
        self.assertEqual(alice.total_commits, alice.direct_commits + alice.merge_commits)
        # 合并对比带来的行数计入贡献者统计
        self.assertEqual(alice.additions, 23)
        self.assertEqual(alice.deletions, 6)
        self.assertEqual(alice.files_changed, 3)

        self.assertEqual(sum(c.total_commits for c in stats), len(commits))

    def test_ties_keep_first_appearance_order(self):
        commits = [
            make_direct("c1", "carol"),
            make_direct("d1", "dave"),
            make_direct("e1", "erin"),
            make_direct("d2", "dave"),
        ]
        self.assertEqual(
            [c.name for c in analyze_contributors(commits)],
            ["dave", "carol", "erin"],
        )

    def test_merge_without_provenance_counts_only_the_commit(self):
        stats = analyze_contributors([make_merge("m1", "bob", files=None)])
        self.assertEqual(stats[0].merge_commits, 1)
        self.assertEqual(stats[0].additions, 0)
        self.assertEqual(stats[0].files_changed, 0)

    def test_is_deterministic(self):
        commits = [
            make_direct("a1", "alice", [make_file("x.py", 3, 1)]),
            make_merge("m1", "bob", [make_file("y.py", 2, 2)]),
        ]
        self.assertEqual(analyze_contributors(commits), analyze_contributors(commits))

    def test_empty_batch(self):
        self.assertEqual(analyze_contributors([]), [])


class TestSummarizeRepository(unittest.TestCase):

    def setUp(self):
        self.commits = [
            make_direct("a1", "alice", [make_file("src/a.py", 10, 2), make_file("src/b.py", 4, 0)]),
            make_direct("a2", "alice", []),
            make_merge("m1", "bob", [make_file("src/a.py", 100, 50), make_file("docs/x.md", 3, 0)]),
            make_merge("m2", "bob", files=None),
        ]

    def test_counts(self):
        summary = summarize_repository(self.commits)
        self.assertEqual(summary.commit_count, 4)
        self.assertEqual(summary.direct_commit_count, 2)
        self.assertEqual(summary.merge_commit_count, 2)
        self.assertEqual(
            summary.commit_count,
            summary.direct_commit_count + summary.merge_commit_count,
        )

    def test_total_files_includes_merge_files(self):
        summary = summarize_repository(self.commits)
        self.assertEqual(summary.total_files, 3)
        self.assertEqual(
            collect_filenames(self.commits), ["src/a.py", "src/b.py", "docs/x.md"]
        )

    def test_line_totals_count_direct_commits_only(self):
        summary = summarize_repository(self.commits)
        self.assertEqual(summary.total_additions, 14)
        self.assertEqual(summary.total_deletions, 2)
        # 贡献者统计中包含 Merge 的行数，汇总总数不包含
        bob = next(c for c in summary.contributors if c.name == "bob")
        self.assertEqual(bob.additions, 103)

    def test_stats_wire_keys(self):
        data = summarize_repository(self.commits).to_dict()
        self.assertEqual(
            set(data),
            {
                "commits",
                "directCommits",
                "mergeCommits",
                "totalFiles",
                "totalAdditions",
                "totalDeletions",
                "contributors",
            },
        )
        self.assertEqual(data["contributors"][0]["name"], "alice")
        self.assertIn("totalCommits", data["contributors"][0])


if __name__ == "__main__":
    unittest.main()
