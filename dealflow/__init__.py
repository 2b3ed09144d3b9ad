"""Deal workflow automation and notification engine."""
