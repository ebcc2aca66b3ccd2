"""
Tests for the control plane.
"""

import threading

import pytest

from fakes import InMemoryConfigurationManager
from p2p_rate_alert.components.control_plane import (
    HELP_TEXT,
    ControlPlane,
    PauseFlag,
    format_blacklist,
)
from p2p_rate_alert.models.command import BotCommand
from p2p_rate_alert.models.config import BlackList, Configuration
from p2p_rate_alert.utils.error_handling import CommandError


def command(name, args=""):
    return BotCommand(command=name, args=args, user_id="42", chat_id="1001")


class TestPauseFlag:
    """Test cases for PauseFlag."""

    def test_starts_not_paused(self):
        assert PauseFlag().paused is False

    def test_pause_and_resume_are_idempotent(self):
        flag = PauseFlag()

        flag.pause()
        flag.pause()
        assert flag.paused is True

        flag.resume()
        flag.resume()
        assert flag.paused is False


class TestControlPlane:
    """Test cases for ControlPlane."""

    def setup_method(self):
        """Set up test fixtures."""
        self.config_manager = InMemoryConfigurationManager(
            Configuration(black_list=BlackList(line=["mallory"], bank=[]))
        )
        self.pause_flag = PauseFlag()
        self.plane = ControlPlane(self.config_manager, self.pause_flag)

    def test_pause_and_resume_replies(self):
        """Test the pause and resume replies."""
        assert self.plane.pause() == "paused"
        assert self.pause_flag.paused is True

        assert self.plane.resume() == "restarted"
        assert self.pause_flag.paused is False

    def test_list_blacklist_without_arguments(self):
        """Test that an empty argument lists the blacklist without saving."""
        reply = self.plane.edit_blacklist("")

        assert reply == "Line: mallory\nBank: "
        assert self.config_manager.saves == 0

    def test_add_to_bank_blacklist_persists(self):
        """Test adding an advertiser to the bank list."""
        reply = self.plane.edit_blacklist("abc bank")

        config = self.config_manager.get_config()
        assert config.black_list.bank == ["abc"]
        assert config.black_list.contains("abc")
        assert self.config_manager.saves == 1
        assert reply == "Line: mallory\nBank: abc"

    def test_channel_is_case_insensitive_and_whitespace_tolerant(self):
        """Test argument normalisation."""
        self.plane.edit_blacklist("  bob    LINE  ")

        assert self.config_manager.get_config().black_list.line == ["mallory", "bob"]

    def test_duplicate_entry_not_saved_again(self):
        """Test that re-adding an advertiser keeps the list duplicate-free."""
        self.plane.edit_blacklist("mallory line")

        assert self.config_manager.get_config().black_list.line == ["mallory"]
        assert self.config_manager.saves == 0

    def test_single_token_rejected(self):
        """Test that fewer than two tokens is a command error."""
        with pytest.raises(CommandError, match="invalid arguments"):
            self.plane.edit_blacklist("abc")

    def test_unknown_channel_rejected(self):
        """Test that an unknown channel is a command error."""
        with pytest.raises(CommandError, match="method 'paypay' not supported"):
            self.plane.edit_blacklist("abc paypay")

        assert self.config_manager.saves == 0

    @pytest.mark.asyncio
    async def test_process_command_routes_pause(self):
        """Test routing of pause and restart."""
        result = await self.plane.process_command(command("pause"))
        assert result.success is True
        assert result.message == "paused"
        assert self.pause_flag.paused

        result = await self.plane.process_command(command("restart"))
        assert result.message == "restarted"
        assert not self.pause_flag.paused

    @pytest.mark.asyncio
    async def test_process_command_does_file_io_off_the_loop(self):
        """Test that configuration reads and writes run in a worker thread."""
        result = await self.plane.process_command(command("blacklist", "abc bank"))

        assert result.success is True
        assert self.config_manager.saves == 1
        assert self.config_manager.threads
        assert threading.get_ident() not in self.config_manager.threads

    @pytest.mark.asyncio
    async def test_process_command_returns_error_text(self):
        """Test that command errors become failed results."""
        result = await self.plane.process_command(command("blacklist", "abc"))

        assert result.success is False
        assert result.message == "invalid arguments"

    @pytest.mark.asyncio
    async def test_process_command_ignores_unknown(self):
        """Test that unknown commands are ignored."""
        assert await self.plane.process_command(command("deploy")) is None

    @pytest.mark.asyncio
    async def test_help(self):
        """Test the help reply."""
        result = await self.plane.process_command(command("help"))

        assert result.message == HELP_TEXT
        assert "/blacklist" in result.message


def test_format_blacklist():
    """Test blacklist formatting."""
    config = Configuration(black_list=BlackList(line=["a", "b"], bank=["c"]))

    assert format_blacklist(config) == "Line: a, b\nBank: c"
