from __future__ import annotations

import io
import sys
from typing import Protocol, TextIO

from .manifest import MANIFEST_FILENAME
from .plan import BuildPlan, Step


class CommandSink(Protocol):
    def run(self, step: Step) -> None:
        ...


class ScriptWriter:
    """Writes planned steps to a text stream as a shell script.

    Each step becomes a ``# label`` comment, its command line (when it has one)
    and a blank separator line. Nothing is executed.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def header(self, plan: BuildPlan, origin: str = f"./{MANIFEST_FILENAME}") -> None:
        self.stream.write(f"# Starting build {plan.build_id}\n")
        self.stream.write("set -e\n")
        self.stream.write(f"# Loaded {plan.source_count} sources from {origin}\n\n")

    def run(self, step: Step) -> None:
        self.stream.write(f"# {step.label()}\n")
        command = step.command()
        if command is not None:
            self.stream.write(f"{command}\n")
        self.stream.write("\n")


def execute_plan(plan: BuildPlan, sink: CommandSink) -> None:
    for step in plan.steps:
        sink.run(step)


def render_script(plan: BuildPlan, origin: str = f"./{MANIFEST_FILENAME}") -> str:
    buffer = io.StringIO()
    writer = ScriptWriter(buffer)
    writer.header(plan, origin)
    execute_plan(plan, writer)
    return buffer.getvalue()
