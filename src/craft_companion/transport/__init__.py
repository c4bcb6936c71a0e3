"""Game-session backends: a developer console and an HTTP bridge."""
