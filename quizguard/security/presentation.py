"""
Presentation Mode - Fullscreen capability of the hosting environment
"""

from abc import ABC, abstractmethod


class FullscreenError(Exception):
    """Fullscreen request denied or unsupported by the environment"""


class PresentationMode(ABC):
    """Best-effort fullscreen control. Failures raise FullscreenError."""

    @property
    @abstractmethod
    def is_fullscreen(self) -> bool:
        ...

    @abstractmethod
    def request_fullscreen(self) -> None:
        ...

    @abstractmethod
    def exit_fullscreen(self) -> None:
        ...


class NullPresentation(PresentationMode):
    """Headless host without fullscreen support"""

    @property
    def is_fullscreen(self) -> bool:
        return False

    def request_fullscreen(self) -> None:
        raise FullscreenError("Fullscreen is not supported in this environment")

    def exit_fullscreen(self) -> None:
        pass
