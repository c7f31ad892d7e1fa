from __future__ import annotations

import contextlib
import logging
import os
import sys


class StdoutGuard(contextlib.AbstractContextManager):
    """
    Logging setup for the cmdstream CLI commands.

    `cmdstream cat` may write its records to file:///dev/stdout, so the
    facility's EOF/reopen/corruption diagnostics must never share that
    channel:

    - the root logger is configured once, to stderr, at CMDSTREAM_LOG_LEVEL
    - pending text on sys.stdout is flushed on entry so it cannot interleave
      with records written through a separate /dev/stdout handle
    - sys.stdout is restored on exit
    """

    def __init__(self) -> None:
        self._orig_stdout = sys.stdout
        # Configure root logger only once
        if not logging.getLogger().handlers:
            logging.basicConfig(
                stream=sys.stderr,
                level=os.environ.get("CMDSTREAM_LOG_LEVEL", "INFO").upper(),
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )

    def __enter__(self) -> StdoutGuard:
        sys.stdout.flush()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        sys.stdout = self._orig_stdout
        return False
