"""Command pattern for changes made through the backend of record."""

from abc import ABC, abstractmethod


class Command(ABC):
    """
    Base class for reversible commands.

    A command talks to the backend through the Sync Client.  :meth:`undo`
    reverses a successful :meth:`execute`, which is what lets a multi-step
    operation roll back the steps it has already completed.
    """

    @abstractmethod
    def execute(self) -> bool:
        """
        Execute the command.

        Returns:
            True if successful, False otherwise

        """

    @abstractmethod
    def undo(self) -> bool:
        """
        Undo the command.

        Returns:
            True if successful, False otherwise

        """

    @abstractmethod
    def get_description(self) -> str:
        """
        Get human-readable description of the command.

        Returns:
            Description string

        """

    @property
    def needs_full_reload(self) -> bool:
        """
        Whether the board must reload every note after the command.

        Returns:
            True if the command needs a full reload, False otherwise

        """
        return False
