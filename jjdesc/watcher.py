"""
Watcher Layer - Re-render a description file while it is being edited.

Monitors the file's directory using watchdog and, once edits have been idle
for the configured timeout, hands the file's new text to a callback.
"""

import os
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer


class DescriptionEventHandler(FileSystemEventHandler):
    """Event handler that debounces changes to a single file."""

    def __init__(self, path: str, on_change: Callable[[str], None], idle_timeout: float = 0.3):
        super().__init__()
        self.path = str(Path(path).resolve())
        self.on_change = on_change
        self.idle_timeout = idle_timeout
        self.last_change_time: Optional[float] = None
        self.idle_timer: Optional[threading.Timer] = None
        self.lock = threading.Lock()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if not self._is_target(event):
            return
        self._handle_file_change()

    def _is_target(self, event: FileSystemEvent) -> bool:
        # editors often save by writing a temp file and renaming it over ours
        paths = [event.src_path, getattr(event, "dest_path", "")]
        for p in paths:
            if p and str(Path(os.fsdecode(p)).resolve()) == self.path:
                return True
        return False

    def _handle_file_change(self) -> None:
        with self.lock:
            self.last_change_time = time.monotonic()
            self._schedule(self.idle_timeout)

    def _schedule(self, delay: float) -> None:
        # caller holds the lock
        if self.idle_timer is not None:
            self.idle_timer.cancel()
        self.idle_timer = threading.Timer(delay, self._on_idle_timeout)
        self.idle_timer.daemon = True
        self.idle_timer.start()

    def _on_idle_timeout(self) -> None:
        with self.lock:
            last = self.last_change_time
            if last is not None:
                idle = time.monotonic() - last
                if idle < self.idle_timeout:
                    # still editing: wait out the rest of the timeout
                    self._schedule(self.idle_timeout - idle)
                    return
            self.idle_timer = None
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
            self.on_change(text)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error re-reading {self.path}: {e}")

    def cancel(self) -> None:
        with self.lock:
            if self.idle_timer is not None:
                self.idle_timer.cancel()
                self.idle_timer = None


def start_watching(path: str, on_change: Callable[[str], None], idle_timeout: float = 0.3) -> None:
    """Watch ``path`` until interrupted, calling ``on_change`` after each edit.

    Args:
        path: Description file to monitor
        on_change: Receives the file's full text once edits settle
        idle_timeout: Seconds without events before ``on_change`` fires

    Raises:
        RuntimeError: If the file does not exist or watching cannot start
    """
    target = Path(path).resolve()
    if not target.exists():
        raise RuntimeError(f"Path does not exist: {target}")
    if target.is_dir():
        raise RuntimeError(f"Path is a directory: {target}")

    handler = DescriptionEventHandler(str(target), on_change, idle_timeout)
    observer = Observer()
    try:
        observer.schedule(handler, str(target.parent), recursive=False)
        observer.start()
    except OSError as e:
        raise RuntimeError(f"Failed to start watching {target}: {e}")

    print(f"Watching {target} for changes (idle timeout: {idle_timeout}s)")
    print("Press Ctrl+C to stop watching...")
    try:
        while observer.is_alive():
            time.sleep(0.5)
    except KeyboardInterrupt:
        print("\nStopping watcher...")
    finally:
        handler.cancel()
        observer.stop()
        observer.join()
