"""CLI helpers: output modes and the session activity log."""
