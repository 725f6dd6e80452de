"""
Map Editor - single writer for the stage map.

Coordinates the stage registry, path derivation and geometry, and the
host collaborators (content factory, texts, confirmation prompt, renderer,
toolbar). Every public operation runs to completion and leaves the stage
list consistent:

- neighbor references are symmetric and never point at the stage itself
- indices are exactly 0..N-1
- the path list matches the neighbor relation

After each change to persisted data, the on_changed callback receives the
element params list.

At most one stage is edited at a time (EditState). While a stage is edited
the map and toolbar are hidden and the renderer gets no updates; closing
the session shows them again and redraws the whole map. The session's
neighbor options and active neighbors are rebuilt after every change to
the stage list.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from stagemap.collaborators import (
    AutoConfirm,
    ConfirmationService,
    ContentFactory,
    DefaultContentFactory,
    NullRenderer,
    NullToolbar,
    Renderer,
    TextSource,
    Toolbar,
)
from stagemap.config import EditorConfig, configure_logging
from stagemap.dictionary import Dictionary
from stagemap.edges import PathCache
from stagemap.errors import AlreadyEditing, NotEditing
from stagemap.model import STAGE_TYPE, Path, Stage, stages_to_params
from stagemap.registry import StageRegistry
from stagemap.scheduler import DeferredScheduler
from stagemap.validation import ValidationResult

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[List[Dict[str, Any]]], None]
Validator = Callable[[], Union[bool, ValidationResult]]


@dataclass
class EditState:
    """Snapshot of the edit session. editing_index is None when idle."""
    editing_index: Optional[int] = None
    neighbor_options: List[Dict[str, str]] = field(default_factory=list)
    active_neighbors: List[str] = field(default_factory=list)

    @property
    def is_editing(self) -> bool:
        return self.editing_index is not None


class MapEditor:
    """Editable undirected graph of stages on a map."""

    def __init__(
        self,
        config: Optional[EditorConfig] = None,
        dictionary: Optional[TextSource] = None,
        content_factory: Optional[ContentFactory] = None,
        renderer: Optional[Renderer] = None,
        toolbar: Optional[Toolbar] = None,
        confirmation: Optional[ConfirmationService] = None,
        scheduler: Optional[DeferredScheduler] = None,
        on_changed: Optional[ChangeCallback] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.config = config or EditorConfig()
        if self.config.log_level:
            configure_logging(self.config.log_level)
        if dictionary is None:
            if self.config.dictionary_path:
                dictionary = Dictionary.from_file(self.config.dictionary_path)
            else:
                dictionary = Dictionary()
        self.dictionary = dictionary
        self.content_factory = content_factory or DefaultContentFactory(
            self.config.default_stage_width, self.config.default_stage_height
        )
        self.renderer = renderer or NullRenderer()
        self.toolbar = toolbar or NullToolbar()
        self.confirmation = confirmation or AutoConfirm()
        self.scheduler = scheduler or DeferredScheduler()

        self.registry = StageRegistry(
            unnamed_prefix=self.dictionary.get("l10n.unnamedStage"), id_factory=id_factory
        )
        self.path_cache = PathCache(aspect_ratio=self.config.aspect_ratio)
        self._state = EditState()
        self._on_changed = on_changed

    # -----------------
    # READ ACCESS
    # -----------------

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def stages(self) -> List[Stage]:
        return self.registry.stages

    @property
    def paths(self) -> List[Path]:
        return self.path_cache.paths

    def count(self) -> int:
        return self.registry.count()

    def get_stage(self, index: int) -> Stage:
        return self.registry.get(index)

    def to_params(self) -> List[Dict[str, Any]]:
        return stages_to_params(self.registry.stages)

    def set_on_changed(self, callback: Optional[ChangeCallback]) -> None:
        self._on_changed = callback

    def _notify_changed(self) -> None:
        if self._on_changed:
            self._on_changed(self.to_params())

    def _render(self, limit: Optional[int] = None) -> None:
        # The map is hidden while a stage is edited; closing the session redraws it
        if self._state.is_editing:
            return
        self.renderer.update(self.registry.stages, self.path_cache.paths, limit)

    # -----------------
    # LOADING
    # -----------------

    def load(self, elements: Iterable[Dict[str, Any]]) -> List[Stage]:
        """
        Replace the map with saved element params.

        Loading is not an edit: no change notification is sent.
        """
        if self._state.is_editing:
            raise AlreadyEditing(self._state.editing_index)
        stages = self.registry.load(elements)
        for stage in stages:
            if stage.content is None:
                stage.content = self.content_factory.create(stage.to_params())
        self.path_cache.update(stages)
        self._render()
        return stages

    # -----------------
    # STAGE OPERATIONS
    # -----------------

    def default_element_params(self, content) -> Dict[str, Any]:
        """
        Params for a new stage centered on the map.

        The height is corrected by the map's aspect ratio so a stage with a
        square default size is drawn square on a non-square map.
        """
        width, height = content.get_default_size()
        height = height * self.config.aspect_ratio
        return {
            "type": STAGE_TYPE,
            "label": self.registry.next_unnamed_label(),
            "telemetry": {
                "x": 50 - width / 2,
                "y": 50 - height / 2,
                "width": width,
                "height": height,
            },
            "neighbors": [],
        }

    def add_stage(self, params: Optional[Dict[str, Any]] = None) -> Stage:
        """
        Append a new stage. Does not open an edit session.

        Args:
            params: Element params overriding the defaults; a partial
                'telemetry' dict is merged into the default telemetry.
        """
        params = params or {}
        content = self.content_factory.create(params)

        element_params = self.default_element_params(content)
        for key, value in params.items():
            if key == "telemetry" and isinstance(value, dict):
                element_params["telemetry"].update(value)
            else:
                element_params[key] = value
        element_params["content"] = content

        requested_neighbors = list(element_params.get("neighbors") or [])
        stage = self.registry.add(element_params)
        if requested_neighbors:
            self.registry.set_neighbors(stage.index, stage.neighbors)
            self.path_cache.update(self.registry.stages, limit=stage.index)

        self._refresh_session()
        self._render(limit=stage.index)
        self._notify_changed()
        return stage

    def update_position(self, index: int, x: float, y: float) -> List[Path]:
        """
        Move a stage. Only the paths touching it get new telemetry.

        Returns:
            The paths whose telemetry was recomputed
        """
        self.registry.set_position(index, x, y)
        touched = self.path_cache.update_touching(self.registry.stages, index)
        self._render(limit=index)
        self._notify_changed()
        return touched

    def update_size(self, index: int, width: float, height: float) -> List[Path]:
        self.registry.set_size(index, width, height)
        touched = self.path_cache.update_touching(self.registry.stages, index)
        self._render(limit=index)
        self._notify_changed()
        return touched

    def set_label(self, index: int, label: str) -> None:
        self.registry.set_label(index, label)
        self._refresh_session()
        self._notify_changed()

    def set_neighbors(self, index: int, neighbors: Iterable[Any]) -> None:
        """
        Set the neighbors of stage `index` and mirror them on every other stage.

        No-op on maps with fewer than two stages. An open edit session sees
        the new neighbor lists immediately; the map is redrawn on commit.
        """
        if not self.registry.set_neighbors(index, neighbors):
            return
        self._refresh_session()
        self.path_cache.update(self.registry.stages, limit=index)
        self._render(limit=index)
        self._notify_changed()

    def remove_node(self, index: int) -> Stage:
        """
        Remove a stage, re-index the rest and rebuild every path.

        If the removed stage was being edited its session ends; any other
        session follows its stage to the new index and drops the removed
        stage from its options.
        """
        removed = self.registry.remove(index)
        # Every index above `index` moved, so all telemetry is recomputed
        self.path_cache.update(self.registry.stages)

        editing = self._state.editing_index
        if editing is not None and editing == index:
            self._close_session()
        else:
            if editing is not None and editing > index:
                self._state.editing_index = editing - 1
            self._refresh_session()
            self._render()
        self._notify_changed()
        return removed

    def request_remove(self, index: int) -> None:
        """
        Ask for confirmation, then remove the stage.

        The stage is tracked by id while the prompt is open, so removals in
        the meantime cannot make the confirmation hit the wrong stage.
        """
        stage_id = self.registry.get(index).id

        def on_confirmed():
            stage = self.registry.find(stage_id)
            if stage is None:
                logger.warning(f"Stage {stage_id} no longer exists, nothing to remove")
                return
            self.remove_node(stage.index)

        self.confirmation.confirm(
            self.dictionary.get("l10n.confirmationDialogRemoveHeader"),
            self.dictionary.get("l10n.confirmationDialogRemoveDialog"),
            self.dictionary.get("l10n.confirmationDialogRemoveCancel"),
            self.dictionary.get("l10n.confirmationDialogRemoveConfirm"),
            on_confirmed,
        )

    def bring_to_front(self, index: int) -> None:
        """
        Draw the stage above all others.

        Only the drawing order changes; the stage keeps its index. If list
        order ever matters, this must move the stage and re-index.
        """
        stage = self.registry.get(index)
        logger.debug(f"Bringing stage {index} to front")
        self.renderer.bring_to_front(stage)

    def send_to_back(self, index: int) -> None:
        """Draw the stage below all others. Same caveat as bring_to_front."""
        stage = self.registry.get(index)
        logger.debug(f"Sending stage {index} to back")
        self.renderer.send_to_back(stage)

    # -----------------
    # EDIT SESSION
    # -----------------

    def _neighbor_options(self, index: int) -> List[Dict[str, str]]:
        return [
            {"value": str(stage.index), "label": stage.label}
            for stage in self.registry.stages
            if stage.index != index
        ]

    def begin_edit(self, index: int) -> EditState:
        """
        Open the edit session for a stage.

        Hides map and toolbar and lists every other stage as a neighbor
        option. Toolbar focus is released once the current work is done.
        """
        stage = self.registry.get(index)
        if self._state.is_editing:
            raise AlreadyEditing(self._state.editing_index, index)

        self._state = EditState(
            editing_index=index,
            neighbor_options=self._neighbor_options(index),
            active_neighbors=list(stage.neighbors),
        )
        self.toolbar.hide()
        self.renderer.hide()
        self.scheduler.call_soon(self.toolbar.blur_all)
        logger.debug(f"Editing stage {index} '{stage.label}'")
        return self._state

    def _refresh_session(self) -> None:
        """Rebuild the session's option and neighbor lists from the registry."""
        editing = self._state.editing_index
        if editing is None:
            return
        self._state.neighbor_options = self._neighbor_options(editing)
        self._state.active_neighbors = list(self.registry.get(editing).neighbors)

    def _check_session(self, index: int) -> None:
        if self._state.editing_index != index:
            raise NotEditing(index, self._state.editing_index)

    def _close_session(self) -> None:
        self._state = EditState()
        self.toolbar.show()
        self.renderer.show()
        self._render()

    def commit_edit(self, index: int, validate: Optional[Validator] = None) -> bool:
        """
        Close the edit session if the form validates.

        Args:
            index: Stage being edited
            validate: Form validation; returns a bool or ValidationResult

        Returns:
            False if validation failed. The session then stays open and
            nothing is changed.
        """
        self._check_session(index)

        result = validate() if validate else True
        if not result:
            errors = result.errors if isinstance(result, ValidationResult) else []
            logger.warning(f"Validation failed for stage {index}: {errors}")
            return False

        self.path_cache.update(self.registry.stages, limit=index)
        self._close_session()
        self._notify_changed()
        return True

    def remove_requested(self, index: int) -> None:
        """Close the edit session from its remove button, then remove after confirmation."""
        self._check_session(index)
        self._close_session()
        self.request_remove(index)

    cancel_edit = remove_requested
