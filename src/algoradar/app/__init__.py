"""Application wiring for the algoradar server."""
