"""Module entry point: run one empty folder cleanup pass."""
import logging
import os
import sys

from botocore.exceptions import BotoCoreError, ClientError

from .controller import SweepController
from .settings import SettingsStorage


def main() -> int:
    logging.basicConfig(
        level=os.environ.get("PYS3SWEEP_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    controller = SweepController(SettingsStorage(os.environ.get("PYS3SWEEP_SETTINGS") or None))
    try:
        report = controller.run_pass()
    except (BotoCoreError, ClientError):
        return 1
    return 0 if report is not None else 2


if __name__ == "__main__":
    sys.exit(main())
