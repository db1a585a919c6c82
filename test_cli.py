import io
import logging
import unittest
from contextlib import redirect_stderr
from unittest.mock import MagicMock, patch

import cli


class TestParser(unittest.TestCase):

    def test_list_repos_needs_no_repository(self):
        args = cli.setup_parser().parse_args(["--list-repos"])
        self.assertTrue(args.list_repos)
        self.assertIsNone(args.repo)

    def test_list_repos_excludes_repository_source(self):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            cli.setup_parser().parse_args(["--list-repos", "-r", "octo/shop"])

    def test_source_is_required(self):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            cli.setup_parser().parse_args([])


class TestRunCli(unittest.TestCase):

    def setUp(self):
        root = logging.getLogger()
        self.addCleanup(root.setLevel, root.level)

    @patch("builtins.print")
    @patch("cli.get_account_data_source")
    def test_list_repos_prints_each_repository(self, get_source, mock_print):
        source = MagicMock()
        source.list_repositories.return_value = ["octo/shop", "octo/api"]
        get_source.return_value = source

        with patch("sys.argv", ["RepoInsight.py", "--list-repos"]):
            with self.assertRaises(SystemExit) as ctx:
                cli.run_cli()

        self.assertEqual(ctx.exception.code, 0)
        mock_print.assert_any_call("octo/shop")
        mock_print.assert_any_call("octo/api")
        source.list_branches.assert_not_called()

    @patch("builtins.print")
    @patch("cli.get_account_data_source")
    def test_verbose_flag_raises_root_log_level(self, get_source, _print):
        get_source.return_value.list_repositories.return_value = []
        logging.getLogger().setLevel(logging.INFO)

        with patch("sys.argv", ["RepoInsight.py", "--list-repos", "-v"]):
            with self.assertRaises(SystemExit):
                cli.run_cli()

        self.assertEqual(logging.getLogger().level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
