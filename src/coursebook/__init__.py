"""Coursebook: a small REST API for users and the courses they own.

Users register, authenticate with HTTP Basic credentials, and manage
courses. Anyone may read courses; only a course's owner may change or
delete it.
"""

__version__ = "0.1.0"
