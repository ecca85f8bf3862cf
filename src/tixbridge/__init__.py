"""tixbridge - backend-for-frontend for a ticket marketplace dashboard."""

__version__ = "0.1.0"
