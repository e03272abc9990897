"""
Core logic for tasktrack: configuration, storage, records, auth and reminders.
"""
