"""Display formatting shared by the window and the command line."""

from ..core import MetadataRecord, ScanResult, TreeNode

CHECKED_GLYPH = "☑"
UNCHECKED_GLYPH = "☐"


def check_glyph(checked: bool) -> str:
    """Checkbox character for a tree row."""
    return CHECKED_GLYPH if checked else UNCHECKED_GLYPH


def node_text(node: TreeNode) -> str:
    """Tree row text: folders get a trailing slash."""
    return f"{node.name}/" if node.is_directory else node.name


def display_value(value: str, max_length: int = 200) -> str:
    """Collapse a multi-line value onto one row and cap its length."""
    flat = " | ".join(line.strip() for line in value.splitlines() if line.strip())
    if len(flat) > max_length:
        return flat[: max_length - 3] + "..."
    return flat


def record_rows(record: MetadataRecord | None, max_length: int = 200) -> list[tuple[str, str]]:
    """Rows for the details table."""
    if record is None:
        return []
    return [(label, display_value(value, max_length)) for label, value in record.as_pairs()]


def render_tree(node: TreeNode, indent: str = "") -> list[str]:
    """Text outline of a tree, one line per node."""
    lines = [f"{indent}{check_glyph(node.checked)} {node_text(node)}"]
    for child in node.children:
        lines.extend(render_tree(child, indent + "    "))
    return lines


def scan_summary(result: ScanResult) -> str:
    """One-line status text after a scan."""
    summary = f"{result.file_count} media files in {result.directory_count} folders"
    if result.skipped_paths:
        summary += f" ({len(result.skipped_paths)} folders skipped)"
    return summary
