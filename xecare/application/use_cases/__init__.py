"""Client-side use cases grouped by feature."""
