from __future__ import annotations

import logging
import sys

from cycle_notify import config
from cycle_notify.orchestrator import run


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    settings = config.Settings.from_env()

    try:
        run(settings)
    except Exception as exc:  # noqa: BLE001
        logging.exception("Run crashed: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
