"""Database maintenance scripts."""
