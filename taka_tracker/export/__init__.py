"""CSV export package."""

from taka_tracker.export.rows import (
    EXPORT_HEADERS,
    export_filename,
    export_rows,
    render_csv,
)

__all__ = ["EXPORT_HEADERS", "export_filename", "export_rows", "render_csv"]
