from doccompare.database.exceptions import BackendUnavailableError
from doccompare.database.models import QueueTask
from doccompare.logging.logger import Log
from doccompare.queue.exceptions import TaskExecutionError
from doccompare.queue.models import DrainReport, TaskOutcome
from doccompare.queue.queue import ProcessingQueue
from doccompare.queue.runner import TaskRunner


class QueueWorker:
    """Claim -> dispatch, one task at a time, until the queue is idle."""

    def __init__(self, queue: ProcessingQueue, runner: TaskRunner) -> None:
        self._queue = queue
        self._runner = runner

    def process_next(self) -> TaskOutcome | None:
        """Claim and run one task. Returns None when nothing is due."""
        task = self._try_claim_task()
        if task is None:
            Log.debug("No tasks in queue, idle")
            return None
        try:
            return self._runner.run(task)
        except TaskExecutionError as exc:
            return exc.outcome

    def drain(self, max_tasks: int) -> DrainReport:
        """Process tasks until the queue is idle or max_tasks have run."""
        Log.info(f"Draining queue (up to {max_tasks} tasks)")
        report = DrainReport()
        while report.processed < max_tasks:
            outcome = self.process_next()
            if outcome is None:
                break
            report.outcomes.append(outcome)
        Log.info(f"Queue drain finished: {report.processed} tasks processed")
        return report

    def _try_claim_task(self) -> QueueTask | None:
        """Attempt to claim the next pending task. Gracefully handle DB errors."""
        try:
            return self._queue.claim_next()
        except BackendUnavailableError as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None
