"""Output file handling."""
