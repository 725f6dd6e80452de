"""
Contracts for the collaborators the map editor talks to.

The editor core owns the stage data only. Content creation, texts,
confirmation prompts, drawing and the toolbar belong to the host, which
plugs in objects satisfying these protocols. Null/default implementations
are provided for headless use and tests.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from stagemap.model import Path, Stage


@runtime_checkable
class StageContent(Protocol):
    """Content placed inside a stage; knows its default size in map percent."""

    def get_default_size(self) -> Tuple[float, float]:
        """Return (width, height) as percentages of the map width."""
        ...


@runtime_checkable
class ContentFactory(Protocol):
    """Creates the content (and its renderable handle) for a new stage."""

    def create(self, params: Dict[str, Any]) -> StageContent:
        ...


@runtime_checkable
class TextSource(Protocol):
    """Key -> display text lookup (see stagemap.dictionary.Dictionary)."""

    def get(self, key: str) -> str:
        ...


@runtime_checkable
class ConfirmationService(Protocol):
    """Asks the user to confirm; calls on_confirmed only if they do."""

    def confirm(self, header_text: str, body_text: str, cancel_text: str,
                confirm_text: str, on_confirmed: Callable[[], None]) -> None:
        ...


@runtime_checkable
class Renderer(Protocol):
    """
    Draws the map from editor snapshots.

    `update` receives the full stage list and path list; `limit` is the
    index of the only stage that changed when the update is partial.
    """

    def update(self, stages: Sequence[Stage], paths: Sequence[Path], limit: Optional[int] = None) -> None:
        ...

    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...

    def bring_to_front(self, stage: Stage) -> None:
        ...

    def send_to_back(self, stage: Stage) -> None:
        ...


@runtime_checkable
class Toolbar(Protocol):
    """The host's drag-and-drop toolbar."""

    def show(self) -> None:
        ...

    def hide(self) -> None:
        ...

    def blur_all(self) -> None:
        ...


# -----------------
# DEFAULTS
# -----------------

@dataclass
class DefaultStageContent:
    """Stage content with a fixed default size."""
    width: float = 5.0
    height: float = 5.0
    params: Optional[Dict[str, Any]] = None

    def get_default_size(self) -> Tuple[float, float]:
        return (self.width, self.height)


class DefaultContentFactory:
    """Creates DefaultStageContent for every stage."""

    def __init__(self, width: float = 5.0, height: float = 5.0):
        self.width = width
        self.height = height

    def create(self, params: Dict[str, Any]) -> StageContent:
        return DefaultStageContent(self.width, self.height, params)


class AutoConfirm:
    """Confirms (or declines) every prompt without asking anyone."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.prompts: List[Tuple[str, str, str, str]] = []

    def confirm(self, header_text: str, body_text: str, cancel_text: str,
                confirm_text: str, on_confirmed: Callable[[], None]) -> None:
        self.prompts.append((header_text, body_text, cancel_text, confirm_text))
        if self.answer:
            on_confirmed()


class NullRenderer:
    """Renderer that draws nothing."""

    def update(self, stages: Sequence[Stage], paths: Sequence[Path], limit: Optional[int] = None) -> None:
        pass

    def show(self) -> None:
        pass

    def hide(self) -> None:
        pass

    def bring_to_front(self, stage: Stage) -> None:
        pass

    def send_to_back(self, stage: Stage) -> None:
        pass


class NullToolbar:
    def show(self) -> None:
        pass

    def hide(self) -> None:
        pass

    def blur_all(self) -> None:
        pass
