"""Infrastructure layer — graph storage and DOT input."""
