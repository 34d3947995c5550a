"""Terminal progress display."""
