"""
Base Command Module.

Every change to an almanac database goes through a command so that it
can be undone. ``BaseCommand.execute`` is a template: subclasses write
``_run`` and ``_revert`` and the base class takes care of the result
object, the logging and the executed flag.

Classes:
    CommandResult: Outcome of a command, handed back to the CLI.
    BaseCommand: Undoable action on a DatabaseService.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Sequence

from almanac.services.db_service import DatabaseService

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """
    Outcome of a command.

    Attributes:
        success (bool): True if the command changed the database.
        message (str): A human-readable message describing the result.
        data (Dict[str, Any]): Values produced by the command (ids, times).
        errors (Dict[str, str]): Validation problems, keyed by position.
        command_name (str): The class name of the command.
    """

    success: bool
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    command_name: str = ""


class BaseCommand(ABC):
    """
    Undoable action on a DatabaseService.

    ``execute`` never raises: failures come back as a result with
    ``success=False`` and leave the command un-executed, so ``undo`` on a
    failed command does nothing.
    """

    def __init__(self) -> None:
        self._is_executed = False

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def is_executed(self) -> bool:
        return self._is_executed

    def execute(self, db_service: DatabaseService) -> CommandResult:
        """
        Performs the action.

        Args:
            db_service: The database to operate on.

        Returns:
            CommandResult: The outcome; ``message`` holds the error text
            when the action failed.
        """
        try:
            result = self._run(db_service)
        except Exception as e:
            logger.error(f"{self.name} failed: {e}")
            return self._fail(str(e))

        if result.success:
            self._is_executed = True
            logger.info(f"{self.name}: {result.message}")
        else:
            logger.warning(f"{self.name} rejected: {result.message}")
        return result

    def undo(self, db_service: DatabaseService) -> None:
        """Reverts a successful ``execute``; a no-op otherwise."""
        if not self._is_executed:
            return
        self._revert(db_service)
        self._is_executed = False
        logger.info(f"Undid {self.name}")

    def _ok(self, message: str, **data: Any) -> CommandResult:
        return CommandResult(
            success=True, message=message, data=data, command_name=self.name
        )

    def _fail(self, message: str, problems: Sequence[str] = ()) -> CommandResult:
        return CommandResult(
            success=False,
            message=message,
            errors={str(i): p for i, p in enumerate(problems)},
            command_name=self.name,
        )

    @abstractmethod
    def _run(self, db_service: DatabaseService) -> CommandResult:
        """
        Does the work of ``execute``.

        Raise, or return ``self._fail(...)``, to report a failure. Either
        way the database must be left unchanged.
        """

    @abstractmethod
    def _revert(self, db_service: DatabaseService) -> None:
        """Undoes what ``_run`` did."""
