"""HTTP Error Handlers."""
