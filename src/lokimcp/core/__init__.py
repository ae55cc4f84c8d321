"""Core query translation and result formatting."""
