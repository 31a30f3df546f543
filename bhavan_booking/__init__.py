"""Client core for the Bhavan Booking mobile app."""

__version__ = "0.1.0"
