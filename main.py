"""Main entry point for the transit alert sync service."""

import sys

from transit_alerts.logging_setup import get_logger
from transit_alerts.service import main as service_main

log = get_logger(__name__)


def main():
    """Entry point that runs one sync cycle or one query."""
    try:
        sys.exit(service_main())
    except KeyboardInterrupt:
        log.info("service_interrupted")
        sys.exit(0)
    except Exception:
        log.exception("service_failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
