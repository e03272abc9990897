"""Route modules for the tasktrack API."""
