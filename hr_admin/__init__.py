"""HR administration API: users, employees and departments."""

__version__ = "1.0.0"
