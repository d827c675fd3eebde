"""QR code based class attendance: session tokens, check-ins and attendance reports."""

__version__ = "0.1.0"
