"""Main application window using tkinter."""

import logging
import tkinter as tk
from tkinter import filedialog, messagebox, ttk

from PIL import ImageTk

from ..core import (
    ApplicationConfig,
    EmptySelectionError,
    ImportSession,
    TreeNode,
)
from .presenters import check_glyph, node_text, record_rows, scan_summary

logger = logging.getLogger(__name__)

PREVIEW_POLL_MS = 100


class MainWindow:
    """Main application window for the media importer."""

    def __init__(self, config: ApplicationConfig | None = None):
        """Initialize the main window."""
        self.root = tk.Tk()
        self.root.title("Media Importer")
        self.root.geometry("1100x750")
        self.root.minsize(700, 450)

        # Application components
        self.config = config or ApplicationConfig()
        self.session = ImportSession(self.config)

        # Keeps the displayed PhotoImage alive
        self._preview_photo: ImageTk.PhotoImage | None = None

        # Setup GUI
        self._setup_gui()
        self._setup_bindings()
        self.root.after(PREVIEW_POLL_MS, self._poll_preview)

    def _setup_gui(self) -> None:
        """Set up the GUI components."""
        self.root.grid_rowconfigure(0, weight=1)
        self.root.grid_columnconfigure(0, weight=1)

        self._create_menu()
        self._create_main_content()
        self._create_status_bar()

    def _create_menu(self) -> None:
        """Create the File menu."""
        menu_bar = tk.Menu(self.root)
        file_menu = tk.Menu(menu_bar, tearoff=False)
        file_menu.add_command(label="Browse for Drive", command=self._browse_directory)
        file_menu.add_command(label="Import Selected Files", command=self._import_selected)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.destroy)
        menu_bar.add_cascade(label="File", menu=file_menu)
        self.root.config(menu=menu_bar)

    def _create_main_content(self) -> None:
        """Create the folder tree, preview and details table."""
        content = ttk.Panedwindow(self.root, orient="vertical")
        content.grid(row=0, column=0, sticky="nsew", padx=5, pady=5)

        top = ttk.Panedwindow(content, orient="horizontal")
        content.add(top, weight=3)

        # Folder tree with a checkbox column
        tree_frame = ttk.Frame(top)
        tree_frame.grid_rowconfigure(0, weight=1)
        tree_frame.grid_columnconfigure(0, weight=1)
        self.folder_tree = ttk.Treeview(tree_frame, columns=("checked",), selectmode="browse")
        self.folder_tree.heading("#0", text="Name", anchor="w")
        self.folder_tree.heading("checked", text="Import")
        self.folder_tree.column("#0", width=260, stretch=True)
        self.folder_tree.column("checked", width=60, anchor="center", stretch=False)
        tree_scroll = ttk.Scrollbar(tree_frame, orient="vertical", command=self.folder_tree.yview)
        self.folder_tree.configure(yscrollcommand=tree_scroll.set)
        self.folder_tree.grid(row=0, column=0, sticky="nsew")
        tree_scroll.grid(row=0, column=1, sticky="ns")
        top.add(tree_frame, weight=1)

        # Preview
        self.preview_label = tk.Label(top, bg="black")
        top.add(self.preview_label, weight=2)

        # Details table
        details_frame = ttk.Frame(content)
        details_frame.grid_rowconfigure(0, weight=1)
        details_frame.grid_columnconfigure(0, weight=1)
        self.details_table = ttk.Treeview(
            details_frame, columns=("property", "value"), show="headings"
        )
        self.details_table.heading("property", text="Property", anchor="w")
        self.details_table.heading("value", text="Value", anchor="w")
        self.details_table.column("property", width=150, stretch=False)
        self.details_table.column("value", width=300, stretch=True)
        details_scroll = ttk.Scrollbar(
            details_frame, orient="vertical", command=self.details_table.yview
        )
        self.details_table.configure(yscrollcommand=details_scroll.set)
        self.details_table.grid(row=0, column=0, sticky="nsew")
        details_scroll.grid(row=0, column=1, sticky="ns")
        content.add(details_frame, weight=2)

    def _create_status_bar(self) -> None:
        """Create the status bar."""
        self.status_bar = ttk.Frame(self.root, relief="sunken", padding="5")
        self.status_bar.grid(row=1, column=0, sticky="ew")

        self.status_label = ttk.Label(self.status_bar, text="Ready")
        self.status_label.grid(row=0, column=0, sticky="w")

    def _setup_bindings(self) -> None:
        """Set up event bindings."""
        self.folder_tree.bind("<<TreeviewSelect>>", self._on_tree_select)
        self.folder_tree.bind("<Button-1>", self._on_tree_click, add="+")
        self.folder_tree.bind("<space>", self._on_toggle_key)
        self.root.protocol("WM_DELETE_WINDOW", self.destroy)

    def _browse_directory(self) -> None:
        """Open directory selection dialog and rebuild the tree."""
        directory = filedialog.askdirectory(title="Select Folder or Drive to Import From")
        if directory:
            self._load_tree(directory)

    def _load_tree(self, directory: str) -> None:
        """Scan `directory` and show it in the folder tree."""
        self._update_status(f"Scanning {directory}...")
        try:
            result = self.session.open_folder(directory)
        except OSError as e:
            logger.error(f"Error scanning {directory}: {e}")
            messagebox.showerror("Scan Error", f"Could not read the selected folder:\n{e}")
            self._update_status("Scan failed")
            return

        self.folder_tree.delete(*self.folder_tree.get_children())
        self._show_details()
        self._show_preview(None)
        self._insert_node("", result.root)
        self.folder_tree.item(result.root.absolute_path, open=True)
        self._update_status(scan_summary(result))

    def _insert_node(self, parent: str, node: TreeNode) -> None:
        """Insert a node and its children into the folder tree."""
        self.folder_tree.insert(
            parent,
            "end",
            iid=node.absolute_path,
            text=node_text(node),
            values=(check_glyph(node.checked),),
        )
        for child in node.children:
            self._insert_node(node.absolute_path, child)

    def _refresh_checks(self, node: TreeNode) -> None:
        """Redraw the checkbox of a node and everything below it."""
        for descendant in node.iter_nodes():
            self.folder_tree.set(descendant.absolute_path, "checked", check_glyph(descendant.checked))

    def _toggle(self, iid: str) -> None:
        node = self.session.find_node(iid)
        if node is None:
            return
        node = self.session.set_checked(iid, not node.checked)
        if node is not None:
            self._refresh_checks(node)
            self._update_status(f"{len(self.session.selected_files())} files selected")

    def _on_tree_click(self, event: tk.Event) -> None:
        """Toggle the checkbox when its column is clicked."""
        if self.folder_tree.identify_column(event.x) != "#1":
            return
        iid = self.folder_tree.identify_row(event.y)
        if iid:
            self._toggle(iid)

    def _on_toggle_key(self, event: tk.Event) -> None:
        for iid in self.folder_tree.selection():
            self._toggle(iid)

    def _on_tree_select(self, event: tk.Event) -> None:
        """Describe the selected file and start its preview."""
        selection = self.folder_tree.selection()
        if not selection:
            return
        node = self.session.find_node(selection[0])
        if node is None or node.is_directory:
            return

        self.session.select_file(node.absolute_path)
        self._show_details()

    def _poll_preview(self) -> None:
        """Pick up a finished preview on the tkinter thread."""
        try:
            result = self.session.poll_preview()
            if result is not None:
                self._show_preview(result.image)
                if result.errors:
                    self._show_details()
        finally:
            self.root.after(PREVIEW_POLL_MS, self._poll_preview)

    def _show_details(self) -> None:
        """Replace the details table with the current metadata record."""
        self.details_table.delete(*self.details_table.get_children())
        for label, value in record_rows(self.session.current_record):
            self.details_table.insert("", "end", values=(label, value))

    def _show_preview(self, image) -> None:
        """Show a PIL image in the preview pane, or clear it."""
        if image is None:
            self._preview_photo = None
            self.preview_label.config(image="")
            return
        self._preview_photo = ImageTk.PhotoImage(image)
        self.preview_label.config(image=self._preview_photo)

    def _import_selected(self) -> None:
        """Copy the checked files to a folder chosen by the user."""
        selected = self.session.selected_files()
        if not selected:
            messagebox.showinfo("No Files Selected", "Please select files to import.")
            return

        destination = filedialog.askdirectory(title="Select destination folder for import")
        if not destination:
            return

        def progress_callback(current: int, total: int | None = None, message: str = "") -> None:
            self._update_status(message or f"Copying {current}/{total}")

        try:
            result = self.session.import_selected(destination, progress_callback)
        except EmptySelectionError as e:
            messagebox.showinfo("No Files Selected", str(e))
            return

        if result.success:
            messagebox.showinfo("Import Complete", "Files imported successfully!")
        else:
            messagebox.showerror(
                "Import Error", f"Error importing files: {result.error}\n\nFile: {result.failed_path}"
            )
        self._update_status(str(result))

    def _update_status(self, message: str) -> None:
        """Update the status bar message."""
        self.status_label.config(text=message)
        self.root.update_idletasks()

    def run(self) -> None:
        """Start the GUI event loop."""
        self.root.mainloop()

    def destroy(self) -> None:
        """Clean up and destroy the window."""
        self.session.close()
        self.root.destroy()
