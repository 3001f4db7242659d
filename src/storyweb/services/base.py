"""BaseService: shared foundation for storyweb services.

Every service receives the resolved :class:`StoryWebSettings` at
construction time and reads graph inputs through :meth:`_load_input`,
which turns loader exceptions into error results.
"""

from __future__ import annotations

import logging
from pathlib import Path

from storyweb.config.settings import StoryWebSettings
from storyweb.domain.types import GraphInput
from storyweb.infrastructure.loader import GraphInputError, load_graph_input
from storyweb.services.result import ServiceResult

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class GraphService(BaseService):
            def build(self, path: Path) -> ServiceResult:
                loaded = self._load_input("build", path)
                if isinstance(loaded, ServiceResult):
                    return loaded
                ...
    """

    def __init__(self, settings: StoryWebSettings | None = None) -> None:
        self._settings = settings or StoryWebSettings()

    @property
    def settings(self) -> StoryWebSettings:
        return self._settings

    def _load_input(self, op: str, path: Path) -> GraphInput | ServiceResult:
        """Read graph input from *path*, or return the failure result for *op*."""
        try:
            graph_input = load_graph_input(path)
        except FileNotFoundError as exc:
            return ServiceResult.failure(op, "NOT_FOUND", str(exc), path=str(path))
        except GraphInputError as exc:
            return ServiceResult.failure(op, "INVALID_INPUT", str(exc), **exc.detail)
        except OSError as exc:
            msg = f"Cannot read input file {path}: {exc.strerror or exc}"
            return ServiceResult.failure(op, "INVALID_INPUT", msg, path=str(path))
        logger.debug(
            "input loaded from %s: %d notes, %d scenes, %d characters",
            path,
            len(graph_input.notes),
            len(graph_input.scenes),
            len(graph_input.characters),
        )
        return graph_input
