from __future__ import annotations

import itertools
import logging
from typing import Callable

import pytest

from metarepo.manifest import Source
from metarepo.plan import (
    DuplicateBranch,
    Fetch,
    MergeLayer,
    SkipSource,
    ZoomIn,
    ZoomOut,
    build_plan,
)

BUILD = "1a2b3c4d"


def counter_tokens() -> Callable[[], str]:
    counter = itertools.count()
    return lambda: f"{next(counter):08x}"


def test_unnamed_source_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    sources = [Source(name="", url="https://example/anon.git"), Source(name="docs")]

    plan = build_plan(sources, BUILD, token_factory=counter_tokens())

    assert plan.steps[0] == SkipSource(index=0)
    fetches = plan.steps_of(Fetch)
    assert [fetch.name for fetch in fetches] == ["docs"]
    layers = [step.destination for step in plan.steps_of(DuplicateBranch)]
    assert not any("/base//" in layer or "/map//" in layer for layer in layers)
    assert any("unnamed source" in record.message for record in caplog.records)


def test_unset_branch_fetches_master() -> None:
    plan = build_plan([Source(name="docs", url="u", branch="")], BUILD)

    (fetch,) = plan.steps_of(Fetch)
    assert fetch.remote_branch == "master"
    assert fetch.branch == "metarepo/1a2b3c4d/base/docs"


def test_identity_mapping_yields_single_layer_without_filters() -> None:
    plan = build_plan([Source(name="docs", url="u")], BUILD)

    assert plan.steps == [
        Fetch(
            build_id=BUILD,
            name="docs",
            url="u",
            remote_branch="master",
            branch="metarepo/1a2b3c4d/base/docs",
        ),
        DuplicateBranch(source="master", destination="metarepo/1a2b3c4d/dst"),
        DuplicateBranch(
            source="metarepo/1a2b3c4d/base/docs",
            destination="metarepo/1a2b3c4d/map/docs/0",
        ),
        MergeLayer(bottom="metarepo/1a2b3c4d/dst", top="metarepo/1a2b3c4d/map/docs/0"),
    ]


def test_docs_example_relocates_under_documentation() -> None:
    source = Source(name="docs", url="https://example/docs.git", mapping=(("/", "/documentation"),))

    plan = build_plan([source], BUILD, token_factory=lambda: "cafebabe")

    assert plan.steps_of(Fetch)[0].remote_branch == "master"
    assert plan.steps_of(ZoomIn) == []
    assert plan.steps_of(ZoomOut) == [
        ZoomOut(branch="metarepo/1a2b3c4d/map/docs/0", directory="documentation", staging="cafebabe")
    ]
    assert len(plan.steps_of(MergeLayer)) == 1


def test_two_sources_keep_relative_order() -> None:
    sources = [
        Source(name="engine", url="e", mapping=(("/src", "/engine"),)),
        Source(name="docs", url="d", mapping=(("/", "/documentation"),)),
    ]

    plan = build_plan(sources, BUILD, token_factory=counter_tokens())
    kinds = [type(step).__name__ for step in plan.steps]

    assert kinds == [
        "Fetch",
        "Fetch",
        "DuplicateBranch",
        "DuplicateBranch",
        "ZoomIn",
        "ZoomOut",
        "MergeLayer",
        "DuplicateBranch",
        "ZoomOut",
        "MergeLayer",
    ]
    assert plan.steps[2] == DuplicateBranch(source="master", destination="metarepo/1a2b3c4d/dst")
    assert plan.steps_of(ZoomIn)[0].directory == "src"


def test_mapping_paths_are_cleaned() -> None:
    source = Source(name="tools", url="t", mapping=(("/scripts/", "hack//bin/.."), ("./", "/")))

    plan = build_plan([source], BUILD, token_factory=counter_tokens())

    assert plan.steps_of(ZoomIn) == [ZoomIn(branch="metarepo/1a2b3c4d/map/tools/0", directory="scripts")]
    assert [zoom.directory for zoom in plan.steps_of(ZoomOut)] == ["hack"]
    assert [merge.top for merge in plan.steps_of(MergeLayer)] == [
        "metarepo/1a2b3c4d/map/tools/0",
        "metarepo/1a2b3c4d/map/tools/1",
    ]


def test_each_zoom_out_gets_its_own_staging_dir() -> None:
    source = Source(name="tools", url="t", mapping=(("/", "/a"), ("/", "/b")))

    plan = build_plan([source], BUILD, token_factory=counter_tokens())

    assert [zoom.staging for zoom in plan.steps_of(ZoomOut)] == ["00000000", "00000001"]


def test_plan_reports_source_count_and_destination() -> None:
    plan = build_plan([Source(name=""), Source(name="docs")], BUILD)

    assert plan.source_count == 2
    assert plan.destination == "metarepo/1a2b3c4d/dst"


def test_source_names_are_cleaned_in_branch_names() -> None:
    plan = build_plan([Source(name="docs/", url="u")], BUILD)

    (fetch,) = plan.steps_of(Fetch)
    assert fetch.branch == "metarepo/1a2b3c4d/base/docs"
    assert [merge.top for merge in plan.steps_of(MergeLayer)] == ["metarepo/1a2b3c4d/map/docs/0"]
