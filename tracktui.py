import curses
import locale
import logging
import sys
from pathlib import Path

from series_tracker.app_state import TrackerApp
from series_tracker.settings import TrackerSettings, load_settings, write_default_config
from series_tracker.store_csv import load_store
from series_tracker.ui_curses import run_session

logger = logging.getLogger("tracktui")


def configure_logging(settings: TrackerSettings) -> None:
    """
    Log to a file; curses owns the terminal while the app runs.
    """
    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    log_path = Path(settings.log_path).expanduser()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            filename=str(log_path),
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    except OSError:
        logging.basicConfig(level=logging.CRITICAL)


def build_app(settings: TrackerSettings) -> TrackerApp:
    data_path = Path(settings.data_path).expanduser()
    store, message = load_store(data_path, settings.default_series_name)
    return TrackerApp.create(
        store,
        data_path,
        input_max_len=settings.input_max_len,
        status=message,
    )


def main() -> int:
    settings, problem = load_settings()
    configure_logging(settings)
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error as e:
        logger.warning("Keeping the C locale: %s", e)
    if problem:
        logger.warning(problem)
    else:
        write_default_config()
    app = build_app(settings)
    logger.info("Starting with data file %s", app.data_path)

    error = curses.wrapper(run_session, app)
    if error is not None:
        print(error, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
