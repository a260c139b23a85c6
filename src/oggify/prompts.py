from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Generic, TypeVar

from rich.console import Console
from rich.markup import escape

T = TypeVar("T")

Reader = Callable[[str], str]

YES_ANSWERS = {"y", "yes"}
NO_ANSWERS = {"n", "no"}

console = Console()


class InputState(Enum):
    AWAITING_INPUT = "awaiting_input"
    VALIDATING = "validating"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class InputMachine(Generic[T]):
    """Retry-until-valid input as explicit states.

    AWAITING_INPUT -> VALIDATING on feed(), then RESOLVED if parse() returns a
    value or REJECTED if it returns None. REJECTED goes back to AWAITING_INPUT
    on retry(). RESOLVED is terminal.
    """

    def __init__(self, parse: Callable[[str], T | None]):
        self.parse = parse
        self.state = InputState.AWAITING_INPUT
        self.value: T | None = None
        self.last_input: str | None = None

    def feed(self, raw: str) -> InputState:
        if self.state is not InputState.AWAITING_INPUT:
            raise RuntimeError(f"Cannot accept input while {self.state.value}")
        self.last_input = raw
        self.state = InputState.VALIDATING
        value = self.parse(raw)
        if value is None:
            self.state = InputState.REJECTED
        else:
            self.value = value
            self.state = InputState.RESOLVED
        return self.state

    def retry(self) -> None:
        if self.state is not InputState.REJECTED:
            raise RuntimeError(f"Cannot retry while {self.state.value}")
        self.state = InputState.AWAITING_INPUT


def ask(
    prompt: str,
    parse: Callable[[str], T | None],
    read: Reader | None = None,
    on_reject: Callable[[str], None] | None = None,
) -> T:
    """Prompt until parse() accepts the answer. EOFError from read() propagates."""
    read = read or console.input
    machine = InputMachine(parse)
    while True:
        if machine.feed(read(prompt)) is InputState.RESOLVED:
            return machine.value
        if on_reject:
            on_reject(machine.last_input)
        machine.retry()


def clean_path_input(raw: str) -> str:
    # Dragging a folder into a terminal wraps it in quotes on some platforms.
    return raw.strip().strip("\"'")


def parse_yes_no(raw: str) -> bool | None:
    answer = raw.strip().lower()
    if answer in YES_ANSWERS:
        return True
    if answer in NO_ANSWERS:
        return False
    return None


def parse_directory(raw: str) -> Path | None:
    text = clean_path_input(raw)
    if not text:
        return None
    path = Path(text).expanduser()
    return path if path.is_dir() else None


def parse_file(raw: str) -> Path | None:
    text = clean_path_input(raw)
    if not text:
        return None
    path = Path(text).expanduser()
    return path.resolve() if path.is_file() else None


def ask_yes_no(prompt: str, read: Reader | None = None) -> bool:
    return ask(
        f"{prompt} (y/n) ",
        parse_yes_no,
        read=read,
        on_reject=lambda _: console.print("[yellow]Please answer y or n.[/yellow]"),
    )


def ask_directory(prompt: str, read: Reader | None = None) -> Path:
    return ask(
        prompt,
        parse_directory,
        read=read,
        on_reject=lambda raw: console.print(f"[red]The directory '{escape(clean_path_input(raw))}' does not exist.[/red]"),
    )


def ask_file(prompt: str, read: Reader | None = None) -> Path:
    return ask(
        prompt,
        parse_file,
        read=read,
        on_reject=lambda raw: console.print(f"[red]File not found: {escape(clean_path_input(raw))}[/red]"),
    )
