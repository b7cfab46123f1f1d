"""
URL Opener

Hands a purchase link to the desktop's opener program
(`open` on macOS, `xdg-open` elsewhere, configurable).

IMPORTANT BOUNDARIES:
1. Only a failure to start the program is an error; what the program
   does with the URL afterwards is its business
2. No retries, no timeout: the call blocks until the program returns
3. Callers invoke this only after the state has been saved
"""

import subprocess
from typing import Optional

from spendqueue.config import get_settings


class UrlOpenerError(Exception):
    """The opener program could not be invoked."""

    def __init__(self, command: str, url: str, message: str):
        self.command = command
        self.url = url
        super().__init__(message)


class UrlOpener:
    """Opens URLs with an external program."""

    def __init__(self, command: Optional[str] = None):
        self._command = command or get_settings().opener.command

    @property
    def command(self) -> str:
        return self._command

    def open(self, url: str) -> None:
        """
        Open `url`.

        Raises:
            UrlOpenerError: If the program can't be started
        """
        try:
            subprocess.run(
                [self._command, url],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            raise UrlOpenerError(
                self._command,
                url,
                f"Can't open purchase URL with '{self._command}': {e}",
            )
