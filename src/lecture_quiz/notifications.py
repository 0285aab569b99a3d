"""Toast-style notifications shown to the user."""
import logging

from rich.console import Console

logger = logging.getLogger(__name__)

SEVERITIES = ("success", "info", "warning", "error")

SEVERITY_STYLES = {
    "success": "green",
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}


class Notifier:
    """Fire-and-forget sink. Subclasses decide where messages go."""

    def notify(self, message: str, severity: str = "success") -> None:
        raise NotImplementedError


class NullNotifier(Notifier):
    def notify(self, message: str, severity: str = "success") -> None:
        logger.debug("Dropped notification (%s): %s", severity, message)


class ConsoleNotifier(Notifier):
    def __init__(self, console: Console = None):
        self.console = console or Console()

    def notify(self, message: str, severity: str = "success") -> None:
        style = SEVERITY_STYLES.get(severity, "white")
        self.console.print(f"[{style}]» {message}[/{style}]")
