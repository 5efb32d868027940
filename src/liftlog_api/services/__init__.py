"""Services backing the HTTP routes."""
