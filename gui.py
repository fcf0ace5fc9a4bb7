"""
GUI for the directory size viewer.
Lists the children of a folder with their sizes using tkinter.
"""
import logging
import os
import queue
import time
import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from multiprocessing import Process, Queue, Event

from scanner import format_size, scan_directory

logger = logging.getLogger(__name__)

APP_TITLE = "DirSizeViewer"

COLUMNS = ('name', 'size', 'type')
HEADINGS = {'name': "Name", 'size': "Size", 'type': "Type"}

SORT_KEYS = {
    'name': lambda item: item.name.lower(),
    'size': lambda item: item.size,
    'type': lambda item: (item.kind, item.name.lower()),
}


def validate_path(path):
    """Return an error message when path cannot be scanned, else None."""
    if not path:
        logger.warning("Scan requested without a folder")
        return "Please enter or select a folder."

    if not os.path.exists(path):
        logger.error("Invalid path, does not exist: %s", path)
        return f"Path does not exist: {path}"

    if not os.path.isdir(path):
        logger.error("Invalid path, not a folder: %s", path)
        return "Path must be a folder."

    return None


class DirectorySizeViewer:
    def __init__(self, root):
        self.root = root
        self.root.title(APP_TITLE)
        self.root.geometry("800x550")

        # Data structures
        self.row_items = {}  # Maps tree row id -> DirectoryItem
        self.sort_column = 'size'
        self.sort_reverse = True

        # Multiprocessing
        self.result_queue = None
        self.scanner_process = None
        self.stop_event = None

        # Current scan
        self.scan_path = None
        self.scan_start_time = None
        self.stop_requested = False

        self.create_widgets()

    def create_widgets(self):
        """Create GUI widgets."""
        top_frame = ttk.Frame(self.root, padding="10")
        top_frame.pack(fill=tk.X)

        self.select_btn = ttk.Button(top_frame, text="Select Folder", command=self.select_folder)
        self.select_btn.pack(side=tk.LEFT, padx=(0, 5))

        self.path_var = tk.StringVar()
        self.path_entry = ttk.Entry(top_frame, textvariable=self.path_var, width=60)
        self.path_entry.pack(side=tk.LEFT, padx=(0, 5), fill=tk.X, expand=True)
        self.path_entry.bind('<Return>', lambda event: self.start_scan())

        self.scan_btn = ttk.Button(top_frame, text="Scan", command=self.start_scan)
        self.scan_btn.pack(side=tk.LEFT, padx=(0, 5))

        self.stop_btn = ttk.Button(top_frame, text="Stop", command=self.stop_scan, state=tk.DISABLED)
        self.stop_btn.pack(side=tk.LEFT)

        # Status bar
        status_frame = ttk.Frame(self.root, padding="5 0 5 5")
        status_frame.pack(fill=tk.X)

        self.status_var = tk.StringVar(value="Ready")
        ttk.Label(status_frame, textvariable=self.status_var).pack(side=tk.LEFT)

        # Table frame with scrollbar
        table_frame = ttk.Frame(self.root)
        table_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 10))

        vsb = ttk.Scrollbar(table_frame, orient=tk.VERTICAL)
        self.table = ttk.Treeview(table_frame, columns=COLUMNS, show='headings',
                                  yscrollcommand=vsb.set)
        vsb.config(command=self.table.yview)

        self.table.grid(row=0, column=0, sticky='nsew')
        vsb.grid(row=0, column=1, sticky='ns')
        table_frame.grid_rowconfigure(0, weight=1)
        table_frame.grid_columnconfigure(0, weight=1)

        for column in COLUMNS:
            self.table.heading(column, command=lambda c=column: self.on_heading_click(c))
        self.table.column('name', width=450, minwidth=150)
        self.table.column('size', width=140, anchor=tk.E)
        self.table.column('type', width=100, anchor=tk.W)
        self.update_headings()

        self.table.tag_configure('folder', foreground='#0066cc')

    def set_scanning(self, scanning):
        """Enable or disable the controls while a scan runs."""
        state = tk.DISABLED if scanning else tk.NORMAL
        self.select_btn.config(state=state)
        self.scan_btn.config(state=state)
        self.path_entry.config(state=state)
        self.stop_btn.config(state=tk.NORMAL if scanning else tk.DISABLED)

    def select_folder(self):
        """Open folder picker and scan the chosen folder."""
        logger.info("Select folder clicked")
        directory = filedialog.askdirectory(parent=self.root)
        if directory:
            self.path_var.set(directory)
            self.start_scan()

    def start_scan(self, path=None):
        """Start scanning process."""
        if self.scanner_process is not None:
            return

        if path is not None:
            self.path_var.set(path)
        path = self.path_var.get().strip()

        error = validate_path(path)
        if error:
            if path:
                messagebox.showerror("Invalid Path", error)
            else:
                messagebox.showwarning("No Path", error)
            return

        logger.info("Scanning %s", path)

        # Clear previous results
        self.table.delete(*self.table.get_children())
        self.row_items.clear()
        self.scan_path = path
        self.stop_requested = False

        self.result_queue = Queue()
        self.stop_event = Event()
        self.scanner_process = Process(
            target=scan_directory,
            args=(path, self.result_queue, self.stop_event),
            daemon=True,
        )
        self.scanner_process.start()

        self.set_scanning(True)
        self.root.title(f"{APP_TITLE} - {path} (calculating...)")
        self.scan_start_time = time.perf_counter()
        self.status_var.set("Starting scan...")

        self.root.after(50, self.poll_queue)

    def stop_scan(self):
        """Ask the scanning process to stop."""
        if self.stop_event:
            self.stop_event.set()
            self.stop_requested = True
            self.status_var.set("Stopping scan...")

    def poll_queue(self):
        """Poll queue for results from scanner process."""
        if self.result_queue is None:
            return

        for _ in range(10):
            try:
                result = self.result_queue.get_nowait()
            except queue.Empty:
                break

            if result == 'DONE':
                self.finish_scan(success=True)
                return
            elif isinstance(result, tuple) and result[0] == 'START':
                self.status_var.set(f"Scanning: {result[1]}")
            elif isinstance(result, tuple) and result[0] == 'ERROR':
                self.finish_scan(success=False, error=result[1])
                return
            elif isinstance(result, list):
                self.add_items(result)

        if self.scanner_process and self.scanner_process.is_alive():
            self.root.after(50, self.poll_queue)
        elif self.result_queue is not None and not self.result_queue.empty():
            # Process exited, drain what it left behind
            self.root.after(0, self.poll_queue)
        else:
            self.finish_scan(success=False, error="Scanner process ended unexpectedly")

    def add_items(self, items):
        """Insert a batch of DirectoryItem rows and keep the table sorted."""
        for item in items:
            row_id = self.table.insert(
                '', 'end',
                values=(item.name, item.size_string, item.kind),
                tags=('folder',) if item.is_dir else (),
            )
            self.row_items[row_id] = item

        self.sort_rows()
        elapsed = time.perf_counter() - self.scan_start_time
        self.status_var.set(f"Scanning... {len(self.row_items):,} items ({elapsed:.1f}s)")

    def on_heading_click(self, column):
        """Sort by column; a second click on the same column reverses."""
        if column == self.sort_column:
            self.sort_reverse = not self.sort_reverse
        else:
            self.sort_column = column
            self.sort_reverse = column == 'size'
        self.update_headings()
        self.sort_rows()

    def update_headings(self):
        arrow = ' ▼' if self.sort_reverse else ' ▲'
        for column in COLUMNS:
            text = HEADINGS[column]
            if column == self.sort_column:
                text += arrow
            self.table.heading(column, text=text)

    def sort_rows(self):
        """Reorder rows by the current sort column."""
        key = SORT_KEYS[self.sort_column]
        rows = sorted(self.row_items, key=lambda row_id: key(self.row_items[row_id]),
                      reverse=self.sort_reverse)
        for index, row_id in enumerate(rows):
            self.table.move(row_id, '', index)

    def finish_scan(self, success=True, error=None):
        """Finish the scan and cleanup."""
        if self.scanner_process:
            self.scanner_process.join(timeout=1.0)
            if self.scanner_process.is_alive():
                self.scanner_process.terminate()
            self.scanner_process = None

        self.result_queue = None
        self.stop_event = None

        self.set_scanning(False)
        self.root.title(f"{APP_TITLE} - {self.scan_path}")

        elapsed = time.perf_counter() - self.scan_start_time
        if success:
            total = sum(item.size for item in self.row_items.values())
            verb = "stopped" if self.stop_requested else "complete"
            self.status_var.set(
                f"Scan {verb}: {len(self.row_items):,} items, "
                f"{format_size(total)} in {elapsed:.2f}s"
            )
            logger.info("Scan of %s %s in %.2fs", self.scan_path, verb, elapsed)
        else:
            error = error or "Unknown error"
            self.status_var.set(f"Scan failed: {error}")
            logger.error("Scan of %s failed: %s", self.scan_path, error)
            messagebox.showerror("Error", f"An error occurred: {error}")


def run(path=None):
    """Open the main window, scanning path right away when given."""
    root = tk.Tk()
    app = DirectorySizeViewer(root)
    if path:
        root.after(0, lambda: app.start_scan(path))
    root.mainloop()
