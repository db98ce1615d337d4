"""Scripting backend for the Reminders bridge.

Drives Reminders.app through ``osascript``. Only used for what the EventKit
backend cannot do:

- set-flag: EventKit has no flag field
- list-titles: the simplified projection used when a detailed bulk read fails

Scripts address reminders by name inside a named list; the app resolves
"first reminder whose name is ..." itself.
"""

import subprocess
from typing import List

from config import settings
from exceptions import ScriptingError
from logger_config import setup_logger

logger = setup_logger(__name__, 'backend.log')


# Record separator; Reminders titles may contain line feeds but not this
TITLE_SEPARATOR = "\x1e"


def quote(text: str) -> str:
    """Render text as an AppleScript string literal."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _chomp(text: str) -> str:
    """Drop the single line feed osascript appends to its output."""
    return text[:-1] if text.endswith("\n") else text


class AppleScriptBackend:
    """Runs AppleScript snippets against Reminders.app."""

    def __init__(self, osascript_path: str = None, app_name: str = None):
        self.osascript = osascript_path or settings.OSASCRIPT_PATH
        self.app_name = app_name or settings.REMINDERS_APP

    def run(self, script: str) -> str:
        """Run a script and return its stdout without the final line feed.

        Raises:
            ScriptingError: non-zero exit, carrying stderr as written
        """
        logger.debug(f"osascript: {script.strip()}")
        try:
            result = subprocess.run(
                [self.osascript, "-e", script],
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise ScriptingError(f"Could not run {self.osascript}: {e}") from e

        if result.returncode != 0:
            raise ScriptingError(_chomp(result.stderr))
        return _chomp(result.stdout)

    def set_flag(self, list_name: str, title: str, flagged: bool) -> None:
        script = f"""
            tell application {quote(self.app_name)}
              tell list {quote(list_name)}
                set flagged of (first reminder whose name is {quote(title)}) to {str(flagged).lower()}
              end tell
            end tell
        """
        self.run(script)

    def list_titles(self, list_name: str, include_completed: bool) -> List[str]:
        """Titles of the reminders in a list.

        Titles are joined with TITLE_SEPARATOR rather than line feeds so a
        multi-line title comes back as one entry.
        """
        where = "" if include_completed else " whose completed is false"
        script = f"""
            tell application {quote(self.app_name)}
              set reminderNames to name of every reminder of list {quote(list_name)}{where}
            end tell
            set AppleScript's text item delimiters to (character id 30)
            return reminderNames as text
        """
        output = self.run(script)
        if not output:
            return []
        return output.split(TITLE_SEPARATOR)
