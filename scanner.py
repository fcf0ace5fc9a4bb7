"""
Directory scanner.
Sizes the immediate children of a folder using os.scandir and sends
results to the GUI via a queue.
"""
import logging
import os
import time
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SIZE_UNITS = ['B', 'KB', 'MB', 'GB', 'TB', 'PB']

# Minimum time between two batches sent to the GUI
FLUSH_INTERVAL = 0.1


def format_size(bytes_size):
    """Format bytes into human-readable format (at most two decimals)."""
    if bytes_size == 0:
        return "0 B"

    value = float(bytes_size)
    unit = 0
    while value >= 1024 and unit < len(SIZE_UNITS) - 1:
        value /= 1024
        unit += 1

    text = f"{value:.2f}".rstrip('0').rstrip('.')
    return f"{text} {SIZE_UNITS[unit]}"


@dataclass
class DirectoryItem:
    """One immediate child of the scanned folder."""

    name: str
    path: str
    size: int
    is_dir: bool

    @property
    def kind(self):
        return "Folder" if self.is_dir else "File"

    @property
    def size_string(self):
        return format_size(self.size)


def get_directory_size(path, stop_event=None):
    """
    Sum the sizes of all regular files below path.

    Unreadable directories count as 0 but do not abort the walk.
    Symbolic links are not followed.

    Args:
        path: Directory to measure
        stop_event: Optional event; when set, the partial sum is returned
    """
    total = 0
    pending = [path]

    while pending:
        if stop_event is not None and stop_event.is_set():
            break

        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        # Vanished or unreadable entry
                        continue
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", current, e)
            continue

    return total


def _sort_items(items):
    items.sort(key=lambda item: (-item.size, item.name.lower()))
    return items


def _list_children(path):
    """Split the immediate children of path into (files, folders)."""
    files = []
    folders = []

    with os.scandir(path) as entries:
        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                is_dir = False

            if is_dir:
                folders.append(entry)
                continue

            # Only regular files have a size, same rule as get_directory_size
            size = 0
            try:
                if entry.is_file(follow_symlinks=False):
                    size = entry.stat(follow_symlinks=False).st_size
            except OSError as e:
                logger.debug("Cannot stat %s: %s", entry.path, e)
            files.append(DirectoryItem(entry.name, entry.path, size, False))

    return files, folders


def iter_children(path, stop_event=None):
    """
    Size the immediate children of path, yielding batches of DirectoryItem.

    The first batch holds every file, then each folder is yielded on its
    own once its recursive size is known. A folder interrupted by
    stop_event is dropped.
    """
    files, folders = _list_children(path)
    yield files

    for entry in folders:
        if stop_event is not None and stop_event.is_set():
            return
        size = get_directory_size(entry.path, stop_event)
        if stop_event is not None and stop_event.is_set():
            # Partial size
            return
        yield [DirectoryItem(entry.name, entry.path, size, True)]


def scan_children(path, stop_event=None):
    """
    Size every immediate child of path.

    Returns:
        List of DirectoryItem sorted by size descending
    """
    items = []
    for batch in iter_children(path, stop_event):
        items.extend(batch)
    return _sort_items(items)


def scan_directory(root_path, result_queue, stop_event):
    """
    Size the children of root_path and send results to queue in batches.

    Messages: ('START', root_path), lists of DirectoryItem, then 'DONE'
    or ('ERROR', message).

    Args:
        root_path: Folder whose children are listed
        result_queue: Queue to send results
        stop_event: Event to signal stop request
    """
    buffer = []
    last_send_time = time.perf_counter()

    def send_buffer():
        """Send current buffer to queue and clear it."""
        nonlocal last_send_time
        if buffer:
            result_queue.put(buffer[:])
            buffer.clear()
            last_send_time = time.perf_counter()

    try:
        result_queue.put(('START', root_path))

        first = True
        for batch in iter_children(root_path, stop_event):
            buffer.extend(batch)
            # Files go out right away, folders at most every FLUSH_INTERVAL
            if first or time.perf_counter() - last_send_time >= FLUSH_INTERVAL:
                send_buffer()
            first = False

        send_buffer()
        result_queue.put('DONE')
    except Exception as e:
        logger.exception("Scan of %s failed", root_path)
        result_queue.put(('ERROR', str(e)))
