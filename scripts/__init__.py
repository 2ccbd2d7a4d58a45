"""
Command-line scripts for the wiki user table populator.

Subpackages:
- database: Maintenance jobs that read and write the wiki database
"""

__version__ = "1.2.0"
