"""User-invocable commands and notices."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, TextIO

from .editor import Editor

logger = logging.getLogger(__name__)

FILE_MENU = "file-menu"
EDITOR_MENU = "editor-menu"


class Notifier(Protocol):
    """Shows a short, transient message to the user."""

    def notify(self, message: str) -> None:
        ...


class ConsoleNotifier:
    """Notifier that writes notices to a stream (stderr by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def notify(self, message: str) -> None:
        logger.info("Notice: %s", message)
        print(message, file=self.stream or sys.stderr)


@dataclass
class CommandContext:
    """What the user had in front of them when invoking a command."""

    selection: str = ""
    editor: Optional[Editor] = None


@dataclass
class Command:
    command_id: str
    name: str
    handler: Callable[[CommandContext], Any]
    menus: tuple = ()
    is_available: Optional[Callable[[CommandContext], bool]] = None

    def available(self, context: CommandContext) -> bool:
        if self.is_available is None:
            return True
        return bool(self.is_available(context))


@dataclass
class CommandRegistry:
    """Registered commands, looked up by id or by menu."""

    commands: Dict[str, Command] = field(default_factory=dict)

    def register(self, command: Command) -> Command:
        if command.command_id in self.commands:
            raise ValueError(f"Command already registered: {command.command_id}")
        self.commands[command.command_id] = command
        logger.debug("Registered command '%s'", command.command_id)
        return command

    def available(
        self, context: CommandContext, menu: Optional[str] = None
    ) -> List[Command]:
        return [
            command
            for command in self.commands.values()
            if (menu is None or menu in command.menus) and command.available(context)
        ]

    def invoke(self, command_id: str, context: Optional[CommandContext] = None) -> Any:
        context = context or CommandContext()
        try:
            command = self.commands[command_id]
        except KeyError:
            raise ValueError(f"Unknown command: {command_id}") from None
        if not command.available(context):
            raise ValueError(f"Command '{command.name}' is not available here.")
        logger.info("Running command '%s'", command.name)
        return command.handler(context)
