"""Web API for the classroom engine."""
