from __future__ import annotations

from typing import Callable

try:
    from PyQt6 import QtCore

    _PYQT_IMPORT_ERROR: ModuleNotFoundError | None = None
except ModuleNotFoundError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e


if QtCore is not None:
    class QtTimerHandle:
        def __init__(self, timer: QtCore.QTimer) -> None:
            self._timer = timer

        def cancel(self) -> None:
            if self._timer is None:
                return
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None

    class QtScheduler:
        """One-shot QTimers on the GUI thread."""

        def __init__(self, parent: QtCore.QObject | None = None) -> None:
            self.parent = parent

        def call_later(self, delay_sec: float, fn: Callable[[], None]) -> QtTimerHandle:
            timer = QtCore.QTimer(self.parent)
            timer.setSingleShot(True)
            handle = QtTimerHandle(timer)

            def _fire() -> None:
                handle.cancel()
                fn()

            timer.timeout.connect(_fire)
            timer.start(max(0, int(round(float(delay_sec) * 1000))))
            return handle
else:
    class QtScheduler:
        def __init__(self, parent=None) -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for QtScheduler. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
