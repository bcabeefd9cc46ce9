"""Console output abstraction.

Services talk to a `ConsoleProtocol` rather than to Rich directly, so the
release flow can be exercised in tests with `MockConsole`. Diagnostics
(errors, warnings, the escalated alert) go to stderr and carry the
`shipit:` prefix; progress goes to stdout.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "PREFIX",
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]

PREFIX = "shipit"


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()
    ALERT = auto()  # escalated failure banner
    PROMPT = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for operator-facing output and prompts."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None:
        """Print a prefixed error message to stderr."""
        ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None:
        """Print a section header (one per release step)."""
        ...

    def alert(self, title: str, lines: Iterable[str]) -> None:
        """Print a highly visible banner to stderr.

        Used when a failure leaves remote state possibly half-published and
        the operator has to inspect it by hand.
        """
        ...

    def ask(self, prompt: str) -> str:
        """Read one line of operator input. Returns "" on EOF."""
        ...


class RichConsole:
    """Console implementation backed by Rich."""

    def __init__(self) -> None:
        from rich.console import Console

        self._out = Console(highlight=False)
        self._err = Console(stderr=True, highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
            Style.ALERT: "red bold",
            Style.PROMPT: "bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._out.print(message, style=rich_style, markup=False)
        else:
            self._out.print(message, markup=False)

    def success(self, message: str) -> None:
        self._out.print(f"[green]OK[/green] {_escape(message)}")

    def error(self, message: str) -> None:
        self._err.print(f"[red bold]{PREFIX}: error:[/red bold] {_escape(message)}")

    def warning(self, message: str) -> None:
        self._err.print(f"[yellow]{PREFIX}: warning:[/yellow] {_escape(message)}")

    def info(self, message: str) -> None:
        self._out.print(f"[cyan]{PREFIX}:[/cyan] {_escape(message)}")

    def header(self, message: str) -> None:
        self._out.print(f"\n[blue bold]==> {_escape(message)}[/blue bold]")

    def alert(self, title: str, lines: Iterable[str]) -> None:
        from rich.panel import Panel
        from rich.text import Text

        body = Text("\n".join(lines), style="bold")
        self._err.print(
            Panel(
                body,
                title=f"{PREFIX}: {title}",
                border_style="red bold",
                expand=False,
            )
        )

    def ask(self, prompt: str) -> str:
        try:
            return self._out.input(f"[bold]{_escape(prompt)}[/bold] ")
        except EOFError:
            return ""


def _escape(message: str) -> str:
    from rich.markup import escape

    return escape(message)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


def _empty_answers() -> list[str]:
    return []


@dataclass
class MockConsole:
    """Console that records output and replays canned answers.

    Example:
        console = MockConsole(answers=["yes"])
        assert console.ask("Continue?") == "yes"
        assert console.prompts == ["Continue?"]
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    answers: list[str] = field(default_factory=_empty_answers)
    prompts: list[str] = field(default_factory=_empty_answers)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"{PREFIX}: error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"{PREFIX}: warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"{PREFIX}: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def alert(self, title: str, lines: Iterable[str]) -> None:
        self.outputs.append(OutputRecord(f"{PREFIX}: {title}", Style.ALERT))
        for line in lines:
            self.outputs.append(OutputRecord(line, Style.ALERT))

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        self.outputs.append(OutputRecord(prompt, Style.PROMPT))
        if not self.answers:
            return ""
        return self.answers.pop(0)

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_alert(self) -> bool:
        return any(o.style == Style.ALERT for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
