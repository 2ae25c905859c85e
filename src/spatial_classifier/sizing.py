"""
Sizing sources.

A sizing source pushes the live size of the rendering surface to its
observers. The layout never polls for size.
"""

from typing import Callable, List, Optional

from .canvas import CanvasSize

SizeObserver = Callable[[CanvasSize], None]


class SizingSource:
    """
    Observable canvas size.

    ``observe`` immediately reports the current size (if known) and then
    every change. GUI front ends call ``report`` from their resize
    callbacks.
    """

    def __init__(self, initial: Optional[CanvasSize] = None):
        self._size = initial
        self._observers: List[SizeObserver] = []

    @property
    def size(self) -> Optional[CanvasSize]:
        return self._size

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def observe(self, observer: SizeObserver) -> Callable[[], None]:
        """
        Returns:
            Callable that disconnects the observer.
        """
        self._observers.append(observer)
        if self._size is not None:
            observer(self._size)

        def disconnect():
            if observer in self._observers:
                self._observers.remove(observer)

        return disconnect

    def report(self, width: float, height: float) -> None:
        size = CanvasSize(float(width), float(height))
        if size == self._size:
            return
        self._size = size
        for observer in list(self._observers):
            observer(size)
