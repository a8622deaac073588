from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import List, Sequence

from .branches import base_branch, clean_path, map_branch
from .manifest import Source
from .plan import BuildPlan, Fetch, MergeLayer, SkipSource, ZoomIn, ZoomOut


def describe_sources(sources: Sequence[Source]) -> List[str]:
    lines = []
    for index, source in enumerate(sources):
        name = source.name or f"<unnamed #{index}>"
        owner = source.owner or "-"
        lines.append(f"{name}: {source.url} ({source.branch}) [owner: {owner}]")
    return lines


def summarize_plan(plan: BuildPlan) -> str:
    lines = []
    title = f"Build {plan.build_id}"
    lines.append(title)
    lines.append("=" * len(title))
    lines.append(f"Destination: {plan.destination}")
    lines.append(f"Sources loaded: {plan.source_count}")
    lines.append("")
    for step in plan.steps:
        if isinstance(step, SkipSource):
            lines.append(f"- #{step.index}: skipped (unnamed)")
        elif isinstance(step, Fetch):
            layer_root = posixpath.dirname(map_branch(step.build_id, step.name, 0))
            layers = sum(
                1
                for merge in plan.steps_of(MergeLayer)
                if posixpath.dirname(merge.top) == layer_root
            )
            lines.append(
                f"- {step.name}: {step.remote_branch} -> {step.branch} ({layers} layer(s))"
            )
    lines.append("")
    lines.append(
        "Filters: {} zoom-in, {} zoom-out".format(
            len(plan.steps_of(ZoomIn)), len(plan.steps_of(ZoomOut))
        )
    )
    return "\n".join(lines)


def write_markdown_report(
    output_path: Path,
    plan: BuildPlan,
    sources: Sequence[Source],
) -> None:
    lines = [f"# Meta-repo Build {plan.build_id}", ""]
    lines.append(f"Destination branch: `{plan.destination}`")
    lines.append("")

    lines.append("## Sources")
    lines.append("")
    for index, source in enumerate(sources):
        if not source.name:
            lines.append(f"- _unnamed source #{index}_ — skipped")
            lines.append("")
            continue
        lines.append(f"- **{source.name}** — `{source.url}` @ `{source.branch}`")
        if source.owner:
            lines.append(f"  - Owner: {source.owner}")
        lines.append(f"  - Base: `{base_branch(plan.build_id, source.name)}`")
        for mapid, (from_path, to_path) in enumerate(source.mapping):
            lines.append(
                f"  - Map {mapid}: `{clean_path(from_path)}` → `{clean_path(to_path)}`"
                f" on `{map_branch(plan.build_id, source.name, mapid)}`"
            )
        lines.append("")

    output_path.write_text("\n".join(lines).rstrip() + "\n")
    logging.info("Wrote report to %s", output_path)
