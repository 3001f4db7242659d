"""Load graph inputs (notes, scenes, characters) from a JSON document.

Expected shape, every key optional::

    {
      "notes": [{"id": "...", "title": "...", "parentId": null,
                 "outgoingLinks": [], "sceneLinks": [], "tags": []}],
      "scenes": [{"characterId": "...", "sceneNumber": 1, "title": "...", "tags": []}],
      "characters": [{"id": "...", "name": "..."}]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from storyweb.domain.types import GraphInput


class GraphInputError(ValueError):
    """The input document is not valid JSON or does not match the schema."""

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


def parse_graph_input(raw: str, *, source: str = "<input>") -> GraphInput:
    """Validate a JSON string into a :class:`GraphInput`."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {source}: {exc.msg} (line {exc.lineno})"
        raise GraphInputError(msg, detail={"source": source, "line": exc.lineno}) from exc
    if not isinstance(data, dict):
        msg = f"Expected a JSON object in {source}, got {type(data).__name__}"
        raise GraphInputError(msg, detail={"source": source})
    try:
        return GraphInput.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        msg = f"Invalid graph input in {source}: {len(errors)} error(s)"
        raise GraphInputError(msg, detail={"source": source, "errors": errors}) from exc


def load_graph_input(path: Path) -> GraphInput:
    """Read and validate *path*.

    Raises:
        FileNotFoundError: *path* does not exist.
        GraphInputError: The file is not UTF-8 or not valid graph input.
        OSError: The file exists but cannot be read.
    """
    if not path.is_file():
        msg = f"Input file not found: {path}"
        raise FileNotFoundError(msg)
    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Input file {path} is not valid UTF-8 (byte {exc.start})"
        raise GraphInputError(msg, detail={"source": str(path), "byte": exc.start}) from exc
    return parse_graph_input(raw, source=str(path))
