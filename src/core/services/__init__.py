"""Quiz services: candidate draws, scoring and the session controller."""
