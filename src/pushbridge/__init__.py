"""pushbridge: delayed Pushover notifications."""

__version__ = "0.1.0"
