import asyncio
import logging
import sys

from .config import configure_logging
from .controller import run
from .errors import AcquisitionError


logger = logging.getLogger("hello_server")


def main() -> None:
    configure_logging()
    try:
        asyncio.run(run())
    except AcquisitionError as exc:
        logger.critical("Fatal error: Unable to start server on any available port (%s)", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
