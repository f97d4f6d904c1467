import json
import unittest
from pathlib import Path

from click.testing import CliRunner

from groupweaver.cli.main import main as cli_main
from groupweaver.config.settings import SettingsManager


def write_project(root: Path):
    root.mkdir()
    (root / "main.py").write_text("import utils\nprint(utils.helper())\n")
    (root / "utils.py").write_text("def helper():\n    return 1\n")
    (root / "README.md").write_text("# Test Project\n")
    (root / "lib").mkdir()
    (root / "lib" / "strings.py").write_text("def upper(s):\n    return s.upper()\n")


class TestCli(unittest.TestCase):

    def setUp(self):
        self.runner = CliRunner(env={name: None for name in SettingsManager.ENV_MAPPINGS})

    def test_cli_main_help(self):
        """Test that the main CLI entrypoint shows help text."""
        result = self.runner.invoke(cli_main, ['--help'])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("relationship-aware", result.output)
        self.assertIn("group", result.output)
        self.assertIn("relationships", result.output)

    def test_group_json_covers_every_file(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            result = self.runner.invoke(cli_main, ['group', 'proj', '--strategy', 'directory', '--format', 'json'])

            self.assertEqual(result.exit_code, 0, result.output)
            groups = json.loads(result.stdout)
            file_ids = sorted(fid for g in groups for fid in g["fileIds"])
            self.assertEqual(file_ids, ['README.md', 'lib/strings.py', 'main.py', 'utils.py'])
            self.assertTrue(all(g["strategy"] == 'directory' for g in groups))

    def test_group_text_with_token_limit(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            result = self.runner.invoke(cli_main, ['group', 'proj', '-s', 'imports', '--token-limit', '5000'])

            self.assertEqual(result.exit_code, 0, result.output)
            self.assertIn("tokens)", result.stdout)
            self.assertIn("  - main.py", result.stdout)
            self.assertIn("4 files", result.stdout)

    def test_group_with_model_budget(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            result = self.runner.invoke(cli_main, ['group', 'proj', '--model', 'gpt-4o', '-f', 'json'])

            self.assertEqual(result.exit_code, 0, result.output)
            groups = json.loads(result.stdout)
            self.assertTrue(all(g["estimatedTokens"] is not None for g in groups))

    def test_unknown_model(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            result = self.runner.invoke(cli_main, ['group', 'proj', '--model', 'gpt-99'])

            self.assertEqual(result.exit_code, 2)
            self.assertIn("Unknown model", result.output)

    def test_token_limit_and_model_are_exclusive(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            result = self.runner.invoke(cli_main, ['group', 'proj', '--model', 'gpt-4o', '--token-limit', '100'])

            self.assertEqual(result.exit_code, 2)

    def test_invalid_config_file_exits_2(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            Path("bad.json").write_text(json.dumps({"strategy": "alphabetical"}))
            result = self.runner.invoke(cli_main, ['group', 'proj', '--config', 'bad.json'])

            self.assertEqual(result.exit_code, 2)
            self.assertIn("Configuration error", result.output)

    def test_non_numeric_priority_threshold_exits_2(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            Path("gw.yaml").write_text("grouping:\n  priority_threshold: high\n")
            result = self.runner.invoke(cli_main, ['group', 'proj', '-c', 'gw.yaml'])

            self.assertEqual(result.exit_code, 2)
            self.assertIn("priority_threshold", result.output)

    def test_config_file_sets_strategy(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            Path("gw.yaml").write_text("grouping:\n  strategy: directory\n")
            result = self.runner.invoke(cli_main, ['group', 'proj', '-c', 'gw.yaml', '-f', 'json'])

            self.assertEqual(result.exit_code, 0, result.output)
            self.assertTrue(all(g["strategy"] == 'directory' for g in json.loads(result.stdout)))

    def test_empty_project_exits_1(self):
        with self.runner.isolated_filesystem():
            Path("empty").mkdir()
            result = self.runner.invoke(cli_main, ['group', 'empty'])

            self.assertEqual(result.exit_code, 1)

    def test_relationships_text(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            result = self.runner.invoke(cli_main, ['relationships', 'proj', '--type', 'imports'])

            self.assertEqual(result.exit_code, 0, result.output)
            self.assertIn("main.py -> utils.py [imports 0.90]", result.stdout)
            self.assertNotIn("[sibling", result.stdout)

    def test_relationships_json(self):
        with self.runner.isolated_filesystem():
            write_project(Path("proj"))
            result = self.runner.invoke(cli_main, ['relationships', 'proj', '-f', 'json', '--min-strength', '0.6'])

            self.assertEqual(result.exit_code, 0, result.output)
            graph = json.loads(result.stdout)
            self.assertEqual(len(graph["nodes"]), 4)
            self.assertTrue(all(e["strength"] >= 0.6 for e in graph["edges"]))


if __name__ == '__main__':
    unittest.main()
