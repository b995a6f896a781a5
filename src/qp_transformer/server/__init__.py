"""REST and CLI surface for the Q/P transformer."""
