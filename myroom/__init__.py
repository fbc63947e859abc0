"""MyRoom: room listings for students, owners and admins."""

__version__ = "1.0.0"
