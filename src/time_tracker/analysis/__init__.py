"""Statistics and terminal reports."""
