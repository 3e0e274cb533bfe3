"""Interface shared by the error translation strategies."""

from abc import ABC, abstractmethod

from dinostore.repository.exceptions import DatabaseError


class MappingStrategy(ABC):
    """Recognize one failure mode of the database and translate it.

    A strategy that does not recognize an error returns None, leaving the
    decision to the next strategy in line.
    """

    @abstractmethod
    def map(
        self,
        error: Exception,
        entity_type: str,
        entity_id: str | None,
    ) -> DatabaseError | None:
        """Translate the error if it is this strategy's failure mode.

        Args:
            error: The SQLAlchemy or driver exception raised around a statement
            entity_type: Name of the entity model, for messages
            entity_id: Identifier the statement targeted, None when it had none

        Returns:
            The repository exception, or None if the error is not recognized
        """
