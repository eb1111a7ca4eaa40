import os
import unittest
from unittest.mock import AsyncMock, patch

from llmcli.commands import Command, CommandKind, help_lines
from llmcli.core.errors import InvalidCommandError, MissingArgumentError
from llmcli.core.messages import Message, Role
from llmcli.providers import DummyChatbot

from .test_base import BaseChatCLITest


class TestCommandParsing(unittest.TestCase):
    def test_long_and_short_aliases(self):
        """Both spellings of a command map to the same kind"""
        self.assertEqual(Command.parse("/clear"), Command(CommandKind.CLEAR))
        self.assertEqual(Command.parse("/c"), Command(CommandKind.CLEAR))
        self.assertEqual(Command.parse("/list_chatbots").kind, CommandKind.LIST_CHATBOTS)
        self.assertEqual(Command.parse("/lc").kind, CommandKind.LIST_CHATBOTS)
        self.assertEqual(Command.parse("/se").kind, CommandKind.SESSIONS)
        self.assertEqual(Command.parse("/m 2"), Command(CommandKind.MODEL, "2"))

    def test_system_prompt_joins_remaining_tokens(self):
        command = Command.parse("/sys  be   very terse ")
        self.assertEqual(command, Command(CommandKind.SYSTEM, "be very terse"))

    def test_single_argument_commands_take_first_token(self):
        self.assertEqual(Command.parse("/save notes extra").argument, "notes")

    def test_missing_arguments(self):
        """Commands that need an argument report which one is missing"""
        cases = {
            "/system": "System prompt is required.",
            "/chatbot": "Chatbot name is required.",
            "/model": "Model name is required.",
            "/save": "Filename is required.",
            "/load": "Filename is required.",
            "/delete": "Filename is required.",
        }
        for line, message in cases.items():
            with self.subTest(line=line):
                with self.assertRaises(MissingArgumentError) as ctx:
                    Command.parse(line)
                self.assertEqual(str(ctx.exception), message)

    def test_unknown_and_case_sensitive(self):
        for line in ("/foo", "/CLEAR", "/"):
            with self.subTest(line=line):
                with self.assertRaises(InvalidCommandError):
                    Command.parse(line)

    def test_help_lists_every_command(self):
        text = "\n".join(help_lines())
        for kind in CommandKind:
            self.assertIn(f"/{kind.value}", text)
        self.assertIn("/list_chatbots or /lc", text)


class TestCommands(BaseChatCLITest):
    async def test_system_on_empty_transcript(self):
        await self.chat_cli.handle_command("/system be terse")
        self.assertEqual(self.test_session.messages, [Message(Role.SYSTEM, "be terse")])
        self.assertIn("System prompt set.", self.output())

    async def test_system_twice_keeps_one(self):
        """Setting the system prompt twice leaves exactly one, the latest"""
        self.test_session.add_user_message("Hello")
        await self.chat_cli.handle_command("/system first")
        await self.chat_cli.handle_command("/system second")

        system = [m for m in self.test_session.messages if m.role is Role.SYSTEM]
        self.assertEqual(system, [Message(Role.SYSTEM, "second")])
        self.assertEqual(self.test_session.messages[0], Message(Role.SYSTEM, "second"))
        self.assertEqual(len(self.test_session.messages), 2)

    async def test_clear_command(self):
        """Clear removes everything, the system prompt included"""
        self.test_session.set_system_prompt("be terse")
        self.test_session.add_user_message("Hello")
        self.test_session.add_assistant_message("Hi there!")

        await self.chat_cli.handle_command("/clear")

        self.assertEqual(self.test_session.messages, [])
        self.assertIn("Context cleared.", self.output())

    async def test_model_switching(self):
        """Test that model switching works correctly"""
        await self.chat_cli.handle_command("/model 2")
        self.assertEqual(self.chat_cli.chatbot.current_model(), "Model 2")
        self.assertIn("Chatbot model changed to Model 2", self.output())

        # Switching to an unknown model keeps the previous one
        await self.chat_cli.handle_command("/model not-a-real-model")
        self.assertEqual(self.chat_cli.chatbot.current_model(), "Model 2")
        self.assertEqual(self.output().count("Error:"), 1)

    async def test_list_models_marks_current(self):
        await self.chat_cli.handle_command("/list_models")
        output = self.output()
        self.assertIn("Available models:", output)
        self.assertIn("1 <- current", output)
        self.assertNotIn("2 <- current", output)

    async def test_list_chatbots(self):
        await self.chat_cli.handle_command("/lc")
        output = self.output()
        for key in ("gemini", "openai", "dummy"):
            self.assertIn(key, output)

    async def test_switch_chatbot(self):
        """A successful switch replaces the chatbot and closes the old one"""
        old = self.chat_cli.chatbot
        old.aclose = AsyncMock()

        await self.chat_cli.handle_command("/chatbot dummy")

        self.assertIsNot(self.chat_cli.chatbot, old)
        self.assertIsInstance(self.chat_cli.chatbot, DummyChatbot)
        old.aclose.assert_awaited_once()
        self.assertIn("Chatbot changed to Dummy", self.output())

    async def test_switch_chatbot_failure_keeps_current(self):
        old = self.chat_cli.chatbot

        await self.chat_cli.handle_command("/chatbot nope")
        self.assertIs(self.chat_cli.chatbot, old)
        self.assertIn("Unknown chatbot", self.output())

        with patch.dict(os.environ, {}, clear=True):
            await self.chat_cli.handle_command("/cb gemini")
        self.assertIs(self.chat_cli.chatbot, old)
        self.assertIn("API key missing", self.output())

    async def test_switch_chatbot_uses_configured_key(self):
        self.chat_cli.config.api_keys["gemini"] = "secret"
        self.chat_cli.config.default_models["gemini"] = "gemini-2.0-flash"

        await self.chat_cli.handle_command("/chatbot gemini")

        self.assertEqual(self.chat_cli.chatbot.name(), "Gemini")
        self.assertEqual(self.chat_cli.chatbot.current_model(), "Gemini 2.0 Flash")
        await self.chat_cli.chatbot.aclose()

    async def test_info(self):
        await self.chat_cli.handle_command("/info")
        self.assertIn("Current chatbot: Dummy", self.output())
        self.assertIn("Current model: Model 1", self.output())
        self.assertNotIn("System prompt:", self.output())

        self.test_session.set_system_prompt("be terse")
        await self.chat_cli.handle_command("/i")
        self.assertIn("System prompt: be terse", self.output())

    async def test_save_load_delete(self):
        self.test_session.add_user_message("Hello")
        self.test_session.add_assistant_message("Hi there!")
        saved = list(self.test_session.messages)

        await self.chat_cli.handle_command("/save snap")
        self.assertTrue((self.test_sessions_dir / "snap.json").exists())
        self.assertIn("Session saved to snap.json", self.output())

        await self.chat_cli.handle_command("/clear")
        await self.chat_cli.handle_command("/load snap")
        self.assertEqual(self.chat_cli.session.messages, saved)
        self.assertIn("Session loaded from snap.json", self.output())

        await self.chat_cli.handle_command("/delete snap")
        self.assertFalse((self.test_sessions_dir / "snap.json").exists())
        self.assertIn("Session snap.json deleted.", self.output())

    async def test_load_missing_session_keeps_transcript(self):
        self.test_session.add_user_message("Hello")
        await self.chat_cli.handle_command("/load missing")
        self.assertEqual(len(self.test_session.messages), 1)
        self.assertIn("does not exist", self.output())

    async def test_sessions_listing(self):
        await self.chat_cli.handle_command("/sessions")
        self.assertIn("No saved sessions found.", self.output())

        await self.chat_cli.handle_command("/s beta")
        await self.chat_cli.handle_command("/s alpha")
        await self.chat_cli.handle_command("/sessions")
        output = self.output()
        self.assertIn("Saved sessions:", output)
        self.assertLess(output.index("alpha", output.index("Saved sessions:")),
                        output.index("beta", output.index("Saved sessions:")))

    async def test_help(self):
        self.assertTrue(await self.chat_cli.handle_command("/help"))
        self.assertIn("Available commands:", self.output())

    async def test_quit(self):
        self.assertFalse(await self.chat_cli.handle_command("/quit"))
        self.assertIn("Quitting...", self.output())

    async def test_invalid_command(self):
        self.test_session.add_user_message("Hello")
        self.assertTrue(await self.chat_cli.handle_command("/foo"))
        self.assertIn("Error: Invalid command.", self.output())
        self.assertEqual(len(self.test_session.messages), 1)
