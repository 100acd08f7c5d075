from doccompare.bootstrap import build_services
from doccompare.config.settings import Settings
from doccompare.logging.logger import Log
from doccompare.queue.models import OutcomeStatus


def main() -> None:
    """Entry point: build services -> drain the processing queue once -> close."""
    settings = Settings()
    Log.configure(settings.log_level)
    services = build_services(settings)

    try:
        report = services.worker.drain(settings.queue_drain_limit)
        Log.info(
            f"Processed {report.processed} tasks: "
            f"{report.count(OutcomeStatus.COMPLETED)} completed, "
            f"{report.count(OutcomeStatus.RETRYING)} retrying, "
            f"{report.count(OutcomeStatus.FAILED)} failed"
        )
    finally:
        services.close()


if __name__ == "__main__":
    main()
