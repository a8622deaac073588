from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Union

from . import gitutils
from .branches import (
    base_branch,
    clean_path,
    dst_branch,
    is_root,
    map_branch,
    random_token,
    relative_dir,
)
from .manifest import DEFAULT_BRANCH, Source

TokenFactory = Callable[[], str]


@dataclass(frozen=True)
class SkipSource:
    index: int

    def label(self) -> str:
        return f"skipping unnamed source #{self.index}"

    def command(self) -> str | None:
        return None


@dataclass(frozen=True)
class Fetch:
    build_id: str
    name: str
    url: str
    remote_branch: str
    branch: str

    def label(self) -> str:
        return f"[{self.build_id}] fetch({self.name})"

    def command(self) -> str:
        return gitutils.fetch_command(self.url, self.remote_branch, self.branch)


@dataclass(frozen=True)
class DuplicateBranch:
    source: str
    destination: str

    def label(self) -> str:
        return f"dupBranch({self.source}, {self.destination})"

    def command(self) -> str:
        return gitutils.dup_branch_command(self.source, self.destination)


@dataclass(frozen=True)
class ZoomIn:
    branch: str
    directory: str

    def label(self) -> str:
        return f"zoomIn({self.branch}, {self.directory})"

    def command(self) -> str:
        return gitutils.subdirectory_filter_command(self.branch, self.directory)


@dataclass(frozen=True)
class ZoomOut:
    branch: str
    directory: str
    staging: str

    def label(self) -> str:
        return f"zoomOut({self.branch}, {self.directory})"

    def command(self) -> str:
        return gitutils.tree_filter_command(self.branch, self.directory, self.staging)


@dataclass(frozen=True)
class MergeLayer:
    bottom: str
    top: str

    def label(self) -> str:
        return f"mergeLayer({self.bottom}, {self.top})"

    def command(self) -> str:
        return gitutils.merge_layer_command(self.bottom, self.top)


Step = Union[SkipSource, Fetch, DuplicateBranch, ZoomIn, ZoomOut, MergeLayer]


@dataclass
class BuildPlan:
    build_id: str
    source_count: int
    steps: List[Step] = field(default_factory=list)

    @property
    def destination(self) -> str:
        return dst_branch(self.build_id)

    def steps_of(self, kind: type) -> List[Step]:
        return [step for step in self.steps if isinstance(step, kind)]


def build_plan(
    sources: Sequence[Source],
    build_id: str,
    *,
    token_factory: TokenFactory = random_token,
    base: str = DEFAULT_BRANCH,
) -> BuildPlan:
    plan = BuildPlan(build_id=build_id, source_count=len(sources))
    destination = dst_branch(build_id)

    named: List[Source] = []
    for index, source in enumerate(sources):
        if not source.name:
            logging.warning("Skipping unnamed source #%d (url=%r)", index, source.url)
            plan.steps.append(SkipSource(index=index))
            continue
        named.append(source)
        plan.steps.append(
            Fetch(
                build_id=build_id,
                name=source.name,
                url=source.url,
                remote_branch=source.branch or DEFAULT_BRANCH,
                branch=base_branch(build_id, source.name),
            )
        )

    plan.steps.append(DuplicateBranch(source=base, destination=destination))

    for source in named:
        plan.steps.extend(
            _layer_steps(source, build_id, destination, token_factory=token_factory)
        )

    logging.debug("Planned %d step(s) for build %s", len(plan.steps), build_id)
    return plan


def _layer_steps(
    source: Source,
    build_id: str,
    destination: str,
    *,
    token_factory: TokenFactory,
) -> List[Step]:
    steps: List[Step] = []
    source_branch = base_branch(build_id, source.name)
    for index, (raw_from, raw_to) in enumerate(source.mapping):
        from_path = clean_path(raw_from)
        to_path = clean_path(raw_to)
        layer = map_branch(build_id, source.name, index)
        logging.debug("Mapping %s[%d]: %s -> %s", source.name, index, from_path, to_path)

        steps.append(DuplicateBranch(source=source_branch, destination=layer))
        if not is_root(from_path):
            steps.append(ZoomIn(branch=layer, directory=relative_dir(from_path)))
        if not is_root(to_path):
            steps.append(
                ZoomOut(
                    branch=layer,
                    directory=relative_dir(to_path),
                    staging=token_factory(),
                )
            )
        steps.append(MergeLayer(bottom=destination, top=layer))
    return steps
