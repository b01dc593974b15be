"""Unified entry point: dispatches to the appropriate mode.

Reads ``HERALD_MODE`` from the environment and runs the corresponding
pipeline:

- ``analyse`` (default): resolve and record the branch, then decorate the
  pull request if the run belongs to one
- ``resolve``: resolve and record the branch only
- ``decorate``: decorate the pull request only
- ``provision``: register the project and its main branch
"""

from __future__ import annotations

import logging
import os
import sys

from herald.interfaces.config import VALID_MODES
from herald.interfaces.env_utils import DEFAULT_MODE, ENV_MODE

logger = logging.getLogger(__name__)


def main() -> None:
    """Dispatch to the appropriate pipeline based on HERALD_MODE."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    mode = os.environ.get(ENV_MODE, DEFAULT_MODE).strip().lower()

    if mode not in VALID_MODES:
        valid = ", ".join(sorted(VALID_MODES))
        logger.error("Unknown mode: %r (valid: %s)", mode, valid)
        sys.exit(1)

    if mode == "provision":
        from herald.interfaces.provision import run as provision_run

        provision_run()
    else:
        from herald.interfaces.pipeline import run

        run()


if __name__ == "__main__":
    main()
