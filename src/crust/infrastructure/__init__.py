"""Infrastructure layer — process execution for command bodies."""
