import unittest

from errors import InputValidationError
from models import DirectDetail, MergeDetail, NormalizedCommit, ReportSection


WIRE_DIRECT = {
    "sha": "abc1234",
    "message": "feat: add login screen\n\nlong body",
    "author": "alice",
    "date": "2024-05-01T10:00:00Z",
    "isMergeCommit": False,
    "mergeDetails": None,
    "fileDetails": [
        {"filename": "app/login.tsx", "status": "added", "additions": 40, "deletions": 0, "patch": "+x"},
        {"filename": "app/api.ts", "status": "modified", "additions": 3, "deletions": 1},
    ],
    "files": ["app/login.tsx", "app/api.ts"],
}

WIRE_MERGE = {
    "sha": "def5678",
    "message": "Merge pull request #7 from feature/payments",
    "author": "bob",
    "date": "2024-05-02T10:00:00Z",
    "isMergeCommit": True,
    "mergeDetails": {
        "baseSha": "p1",
        "headSha": "p2",
        "totalCommits": 4,
        "changedFiles": [
            {"filename": "app/pay.ts", "status": "added", "additions": 10, "deletions": 0, "patch": "+y"},
        ],
    },
    "fileDetails": [
        {"filename": "ignored.txt", "status": "modified", "additions": 1, "deletions": 1},
    ],
}


class TestNormalizedCommitWireFormat(unittest.TestCase):

    def test_direct_commit_from_dict(self):
        commit = NormalizedCommit.from_dict(WIRE_DIRECT)
        self.assertFalse(commit.is_merge)
        self.assertIsInstance(commit.detail, DirectDetail)
        self.assertEqual(commit.title, "feat: add login screen")
        self.assertEqual(len(commit.file_changes), 2)
        self.assertEqual(commit.file_changes[1].patch, "")
        self.assertIsNone(commit.merge_provenance)
        self.assertEqual(commit.touched_filenames, {"app/login.tsx", "app/api.ts"})

    def test_merge_commit_uses_provenance_not_file_details(self):
        commit = NormalizedCommit.from_dict(WIRE_MERGE)
        self.assertTrue(commit.is_merge)
        self.assertIsInstance(commit.detail, MergeDetail)
        self.assertEqual(commit.file_changes, ())
        self.assertEqual(commit.merge_provenance.total_commits, 4)
        self.assertEqual(commit.filenames, ("app/pay.ts",))

    def test_parents_decide_classification(self):
        data = dict(WIRE_DIRECT, parents=["p1", "p2"], isMergeCommit=False)
        self.assertTrue(NormalizedCommit.from_dict(data).is_merge)

        data = dict(WIRE_MERGE, parents=["p1"])
        self.assertFalse(NormalizedCommit.from_dict(data).is_merge)

    def test_merge_without_details_has_no_provenance(self):
        commit = NormalizedCommit.from_dict(dict(WIRE_MERGE, mergeDetails=None))
        self.assertTrue(commit.is_merge)
        self.assertIsNone(commit.merge_provenance)

    def test_author_and_date_fallbacks(self):
        commit = NormalizedCommit.from_dict({"sha": "x1", "message": "fix"})
        self.assertEqual(commit.author, "Unknown")
        self.assertTrue(commit.timestamp)

    def test_round_trip_keeps_wire_keys(self):
        data = NormalizedCommit.from_dict(WIRE_MERGE).to_dict()
        self.assertEqual(data["mergeDetails"]["baseSha"], "p1")
        self.assertEqual(data["fileDetails"], [])
        self.assertEqual(NormalizedCommit.from_dict(data), NormalizedCommit.from_dict(WIRE_MERGE))

    def test_invalid_entries_are_rejected(self):
        with self.assertRaises(InputValidationError):
            NormalizedCommit.from_dict("not a commit")
        with self.assertRaises(InputValidationError):
            NormalizedCommit.from_dict({"message": "no sha"})
        with self.assertRaises(InputValidationError):
            NormalizedCommit.from_dict(
                dict(WIRE_DIRECT, fileDetails=[{"filename": "a", "additions": -1}])
            )
        with self.assertRaises(InputValidationError):
            NormalizedCommit.from_dict(dict(WIRE_DIRECT, fileDetails="a.py"))

    def test_field_types_are_checked(self):
        bad_entries = [
            dict(WIRE_DIRECT, author={"login": "alice"}),
            dict(WIRE_DIRECT, author=""),
            dict(WIRE_DIRECT, date=1714557600),
            dict(WIRE_DIRECT, fileDetails=[{"filename": "a.py", "patch": 5}]),
            dict(WIRE_DIRECT, fileDetails=[{"filename": "a.py", "status": ["added"]}]),
            dict(
                WIRE_MERGE,
                mergeDetails=dict(WIRE_MERGE["mergeDetails"], changedFiles=[{"filename": "b.py", "patch": 5}]),
            ),
        ]
        for data in bad_entries:
            with self.assertRaises(InputValidationError):
                NormalizedCommit.from_dict(data)

    def test_null_fields_fall_back_to_defaults(self):
        commit = NormalizedCommit.from_dict(
            dict(WIRE_DIRECT, author=None, fileDetails=[{"filename": "a.py", "patch": None, "status": None}])
        )
        self.assertEqual(commit.author, "Unknown")
        self.assertEqual(commit.file_changes[0].patch, "")
        self.assertEqual(commit.file_changes[0].status, "modified")

    def test_commits_are_immutable(self):
        commit = NormalizedCommit.from_dict(WIRE_DIRECT)
        with self.assertRaises(Exception):
            commit.author = "mallory"


class TestReportSection(unittest.TestCase):

    def test_render_joins_title_and_body(self):
        section = ReportSection(title="## TÍTULO", body="corpo\n")
        self.assertEqual(section.render(), "## TÍTULO\n\ncorpo")


if __name__ == "__main__":
    unittest.main()
