"""Tests for output mode selection and the rich renderers."""

from __future__ import annotations

import json

from storyweb.output.console import create_console, get_output, style_for_type
from storyweb.output.formatters import OutputSettings, format_result
from storyweb.output.renderers import render_quiet, render_result
from storyweb.services.result import ServiceResult

BUILD = ServiceResult(
    ok=True,
    op="build",
    data={
        "count": 2,
        "notes": 1,
        "scenes": 1,
        "links": 1,
        "link_types": {"wikilink": 0, "scene-link": 1, "shared-tag": 0},
        "groups": 1,
        "isolated": [],
        "items": [
            {"id": "n1", "title": "Root", "type": "note", "connections": 1, "group": "n1"},
            {"id": "c1:1", "title": "Ada #1", "type": "scene", "connections": 1, "group": "c1"},
        ],
    },
    warnings=["1 scene(s) without connections dropped"],
)

LAYOUT = ServiceResult(
    ok=True,
    op="layout",
    data={
        "count": 1,
        "ticks": 301,
        "alpha": 0.000998,
        "settled": True,
        "items": [{"id": "n1", "type": "note", "x": 12.5, "y": -3.25, "visible": True}],
    },
)

RENDER = ServiceResult(
    ok=True,
    op="render",
    data={
        "output": "out/graph.png",
        "width": 640,
        "height": 480,
        "ticks": 300,
        "visible": 5,
        "scale": 1.25,
    },
)

FAILURE = ServiceResult.failure(
    "build",
    "INVALID_INPUT",
    "Invalid graph input in bad.json: 1 error(s)",
    source="bad.json",
    errors=[{"loc": "notes.0.id", "msg": "Field required"}],
)


class TestFormatResult:
    def test_json_mode(self) -> None:
        output = format_result(BUILD, settings=OutputSettings(json_output=True))
        payload = json.loads(output)
        assert payload["op"] == "build"
        assert payload["data"]["count"] == 2
        assert payload["warnings"] == ["1 scene(s) without connections dropped"]

    def test_quiet_mode(self) -> None:
        assert format_result(BUILD, settings=OutputSettings(quiet=True)) == "n1\nc1:1"

    def test_human_is_default(self) -> None:
        assert format_result(BUILD) == render_result(BUILD)

    def test_json_wins_over_quiet(self) -> None:
        output = format_result(BUILD, settings=OutputSettings(json_output=True, quiet=True))
        assert json.loads(output)["ok"] is True


class TestRenderQuiet:
    def test_render_prints_output_path(self) -> None:
        assert render_quiet(RENDER) == "out/graph.png"

    def test_no_items(self) -> None:
        assert render_quiet(ServiceResult(ok=True, op="view", data={"selected": None})) == "OK: view"

    def test_error(self) -> None:
        assert render_quiet(FAILURE) == (
            "ERROR: build: Invalid graph input in bad.json: 1 error(s)"
        )


class TestRenderResult:
    def test_build(self) -> None:
        output = render_result(BUILD)
        assert "OK" in output
        assert "build" in output
        assert "scene-link 1" in output
        assert "Root" in output
        assert "c1:1" in output

    def test_layout_table(self) -> None:
        output = render_result(LAYOUT)
        assert "ticks: 301" in output
        assert "settled: True" in output
        assert "12.50" in output
        assert "-3.25" in output

    def test_snapshot(self) -> None:
        output = render_result(RENDER)
        assert "output: out/graph.png" in output
        assert "size: 640x480" in output
        assert "scale" not in output

    def test_snapshot_verbose(self) -> None:
        output = render_result(RENDER, verbose=True)
        assert "scale: 1.25" in output
        assert "ticks: 300" in output

    def test_visible_verbose_lists_disabled_toggles(self) -> None:
        result = ServiceResult(
            ok=True,
            op="visible",
            data={
                "filters": {
                    "show_notes": True,
                    "show_scene_to_scene": False,
                    "hidden_character_ids": ["c2"],
                },
                "count": 0,
                "total": 3,
                "links": 0,
                "link_types": {},
                "items": [],
            },
        )
        output = render_result(result, verbose=True)
        assert "0 of 3 nodes" in output
        assert "off: show_scene_to_scene" in output
        assert "hidden_characters: c2" in output

    def test_view_selection(self) -> None:
        result = ServiceResult(
            ok=True, op="view", data={"selected": "n1", "selections": ["n1"]}
        )
        assert "selected: n1" in render_result(result)

    def test_error_lists_schema_errors(self) -> None:
        output = render_result(FAILURE)
        assert "ERROR" in output
        assert "[INVALID_INPUT]" in output
        assert "notes.0.id: Field required" in output
        assert "source" not in output

    def test_error_detail_when_verbose(self) -> None:
        assert "source: bad.json" in render_result(FAILURE, verbose=True)

    def test_message_markup_is_not_interpreted(self) -> None:
        result = ServiceResult.failure("build", "NOT_FOUND", "Input file not found: [bold]x")
        assert "[bold]x" in render_result(result)

    def test_generic_fallback(self) -> None:
        result = ServiceResult(ok=True, op="other", data={"answer": 42, "items": [1]})
        output = render_result(result)
        assert "answer: 42" in output
        assert "items: [1]" in output

    def test_telemetry_tree(self) -> None:
        result = BUILD.model_copy(
            update={
                "meta": {
                    "telemetry": {
                        "name": "GraphService.build",
                        "duration_ms": 3.5,
                        "children": [
                            {
                                "name": "build_graph",
                                "duration_ms": 1.25,
                                "annotations": {"nodes": 2},
                            }
                        ],
                    }
                }
            }
        )
        output = render_result(result, verbose=True)
        assert "GraphService.build" in output
        assert "build_graph  (nodes=2)" in output
        assert "GraphService.build" not in render_result(result)


class TestConsole:
    def test_plain_buffer(self) -> None:
        console = create_console()
        console.print("[sw.ok]hello[/sw.ok]")
        assert get_output(console) == "hello\n"

    def test_type_styles(self) -> None:
        assert style_for_type("note") == "sw.type.note"
        assert style_for_type("scene") == "sw.type.scene"
        assert style_for_type("other") == ""
