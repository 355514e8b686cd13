import argparse

from dronelog.config.settings import Settings
from dronelog.database.connection import close_pool, init_pool
from dronelog.database.repositories.event_repository import StorageEventRepository
from dronelog.logging.logger import Log
from dronelog.processor.handler import build_upload_handler
from dronelog.worker.event_runner import EventRunner


def main(argv: list[str] | None = None) -> None:
    """Start the upload verification worker."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument(
        "--max-events",
        type=int,
        default=None,
        help="stop after running this many storage events",
    )
    args = parser.parse_args(argv)

    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    try:
        runner = EventRunner(
            build_upload_handler(settings),
            StorageEventRepository(settings.max_event_attempts),
            settings,
        )
        handled = runner.poll(args.max_events)
        Log.info(f"Worker stopped after {handled} events")
    finally:
        close_pool()


if __name__ == "__main__":
    main()
