"""Fluent Selenium actions with deadline-bounded retries, window handling and soft assertions."""

__version__ = "0.1.0"
