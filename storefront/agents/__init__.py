"""AI agents and the machinery that plans and runs their steps."""
