"""Product catalog with a remote document store and an in-memory fallback."""
