import io
import unittest
from unittest.mock import patch

from rich.console import Console

from llmcli.utils import Printer, readline_safe_prompt


class TestReadlineSafePrompt(unittest.TestCase):
    def test_plain_prompt_unchanged(self):
        self.assertEqual(readline_safe_prompt("you> "), "you> ")

    def test_escapes_wrapped(self):
        prompt = "\033[1;32myou\033[0m> "
        self.assertEqual(
            readline_safe_prompt(prompt),
            "\001\033[1;32m\002you\001\033[0m\002> ",
        )


class TestPrinterInput(unittest.TestCase):
    def make_printer(self, terminal):
        output = Console(
            file=io.StringIO(),
            force_terminal=terminal,
            color_system="standard" if terminal else None,
            no_color=not terminal,
            width=80,
        )
        return Printer(output), output.file

    @patch("builtins.input", return_value="hello")
    def test_terminal_prompt_goes_through_readline(self, mock_input):
        """The styled prompt is passed to input() instead of printed first"""
        printer, buffer = self.make_printer(terminal=True)

        line = printer.input("[green]you[/]> ")

        self.assertEqual(line, "hello")
        prompt = mock_input.call_args[0][0]
        self.assertEqual(prompt, "\001\033[32m\002you\001\033[0m\002> ")
        self.assertEqual(buffer.getvalue(), "")

    @patch("builtins.input", return_value="hello")
    def test_non_terminal_prompt_plain(self, mock_input):
        printer, buffer = self.make_printer(terminal=False)

        self.assertEqual(printer.input("[green]you[/]> "), "hello")
        self.assertNotIn("\001", buffer.getvalue())
        self.assertIn("you> ", buffer.getvalue())


if __name__ == "__main__":
    unittest.main()
