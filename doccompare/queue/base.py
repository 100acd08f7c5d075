from abc import ABC, abstractmethod

from doccompare.database.models import QueueTask


class BaseTaskHandler(ABC):
    """Executes one kind of queue task. Raises on failure."""

    @abstractmethod
    def handle(self, task: QueueTask) -> None:
        """Do the work for a claimed task."""
