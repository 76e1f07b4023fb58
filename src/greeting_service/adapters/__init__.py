"""Adapters connecting the application layer to files, environment, HTTP and threads."""
