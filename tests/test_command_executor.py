import subprocess
import unittest
from unittest.mock import patch, MagicMock
from aurora.utils.command_executor import run_shell_command


@patch('aurora.utils.command_executor.logger')
class TestRunShellCommand(unittest.TestCase):

    @patch('subprocess.run')
    def test_stdout_discarded_and_cwd_passed(self, mock_run, mock_logger):
        mock_run.return_value = MagicMock(returncode=0)
        self.assertEqual(run_shell_command(["make"], cwd="/src/hello"), ("", "", 0))
        mock_run.assert_called_once_with(
            ["make"], stdout=subprocess.DEVNULL, env=None, check=False, cwd="/src/hello"
        )

    @patch('subprocess.run')
    def test_not_quiet_keeps_stdout(self, mock_run, mock_logger):
        mock_run.return_value = MagicMock(returncode=3)
        self.assertEqual(run_shell_command(["makepkg", "-si"], quiet=False), ("", "", 3))
        self.assertIsNone(mock_run.call_args.kwargs["stdout"])

    @patch('subprocess.run')
    def test_capture_output(self, mock_run, mock_logger):
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=1)
        self.assertEqual(run_shell_command(["git", "--version"], capture_output=True), ("out", "err", 1))

    @patch('subprocess.run', side_effect=FileNotFoundError(2, "No such file or directory", "cargo"))
    def test_missing_command(self, mock_run, mock_logger):
        _, stderr, returncode = run_shell_command(["cargo", "build"])
        self.assertEqual(returncode, -1)
        self.assertIn("No such file", stderr)
        mock_logger.error.assert_called_once_with("Command not found: cargo")

    @patch('subprocess.run', side_effect=PermissionError(13, "Permission denied"))
    def test_not_executable(self, mock_run, mock_logger):
        _, _, returncode = run_shell_command(["./configure"])
        self.assertEqual(returncode, -1)


if __name__ == '__main__':
    unittest.main()
