"""Indented progress messages with timing reports."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import TextIO

from .resources import ResourceUsage

INDENT_SIZE = 2


@dataclass
class _Console:
    enabled: bool = False
    indent_level: int = 0
    lineno: int = 1
    column: int = 0
    last_user: object = None


_console = _Console()


def capitalize(text: str) -> str:
    """Return ``text`` with its first character upper-cased."""
    return text[:1].upper() + text[1:]


def show_messages(flag: bool = True) -> bool:
    """Enable or disable all message output; return the previous setting."""
    previous = _console.enabled
    _console.enabled = flag
    return previous


class MessageHandler:
    """Writes nested, indented progress reports to a text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._name = ""
        self._indent = _console.indent_level * INDENT_SIZE
        self._begin_line = 0
        self._initial_usage = ResourceUsage(0.0)
        self._prev_usage = ResourceUsage(0.0)
        self._total_steps = 0
        self._step_count = 0
        self._dot_count = 0
        self._dot_time = 0.0
        self._stepping = False

    def _out(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def __enter__(self) -> MessageHandler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._name:
            self.end("aborted")

    def write(self, text: str) -> MessageHandler:
        """Write text, indenting each new line and dropping leading blanks."""
        if not _console.enabled:
            return self
        pieces: list[str] = []
        if _console.last_user is not self:
            if _console.column != 0:
                pieces.append("\n")
                _console.lineno += 1
                _console.column = 0
            _console.last_user = self
        for ch in text:
            if _console.column == 0:
                if ch.isspace():
                    continue
                pieces.append(" " * self._indent)
                _console.column += self._indent
            pieces.append(ch)
            if ch == "\n":
                _console.lineno += 1
                _console.column = 0
            else:
                _console.column += 1
        if pieces:
            out = self._out()
            out.write("".join(pieces))
            out.flush()
        return self

    def begin(self, name: str) -> MessageHandler:
        """Open a named section and indent what follows."""
        if not _console.enabled:
            return self
        if self._name:
            self.end("aborted")
        self._name = name or f"level-{_console.indent_level}"
        self._indent = _console.indent_level * INDENT_SIZE
        self.write("\n" + capitalize(self._name))
        _console.indent_level += 1
        self._indent = _console.indent_level * INDENT_SIZE
        self._begin_line = _console.lineno
        self._initial_usage = ResourceUsage()
        self._prev_usage = self._initial_usage
        self.set_steps(10)
        return self

    def set_steps(self, steps: int) -> MessageHandler:
        """Set the number of steps expected before the section ends."""
        if not _console.enabled:
            return self
        self._total_steps = steps
        self._step_count = 0
        self._dot_count = 0
        self._dot_time = time.time()
        self._stepping = False
        return self

    def step(self, dot: str = "-") -> MessageHandler:
        """Record one step of progress."""
        if not _console.enabled:
            return self

        if not self._stepping and self._dot_time + 4 < time.time():
            self.write("\n")
            self._stepping = True

        if self._stepping:
            if self._step_count % 50 != _console.column - self._indent:
                self.write("\n")
                self.write("-" * (self._step_count % 50))
            self.write(dot)
            self._step_count += 1
            if _console.column - self._indent >= 50:
                usage = ResourceUsage()
                diff = usage - self._prev_usage
                percent = self._step_count * 100 // self._total_steps
                self.write(
                    f"{percent:>3}% ({diff.elapsed_time()}, {diff.memory()})\n"
                )
                self._prev_usage = usage
        else:
            self._step_count += 1
            while self._dot_count * self._total_steps < self._step_count * 10:
                if self._dot_count == 0:
                    self.write(" ")
                self.write(".")
                self._dot_count += 1
                self._dot_time = time.time()
        return self

    def end(self, msg: str = "", info: str = "") -> MessageHandler:
        """Close the current section and report the resources it used."""
        if not _console.enabled or not self._name:
            return self

        usage = ResourceUsage() - self._initial_usage

        if self._begin_line == _console.lineno:
            if info:
                self.write(" " + info)
            elif not msg:
                self.write(" done")
            else:
                self.write(" " + msg)
            self.write(f" in {usage}.\n")
            _console.indent_level -= 1
            self._indent = _console.indent_level * INDENT_SIZE
        else:
            _console.indent_level -= 1
            self._indent = _console.indent_level * INDENT_SIZE
            if not msg:
                self.write("\nDone " + self._name)
            else:
                self.write("\n" + capitalize(msg))
            if info:
                self.write(" " + info)
            self.write(f" in {usage}.\n")

        self._name = ""
        return self

    def end_with_size(self, n: int) -> MessageHandler:
        """Close the section, reporting a size such as a node count."""
        if not _console.enabled:
            return self
        return self.end("", f"<{n}>")

    def column(self) -> int:
        """Current output column."""
        return _console.column