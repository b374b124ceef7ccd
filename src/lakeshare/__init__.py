"""Custom resources that wire a Security Lake resource share into this account."""

__version__ = "0.1.0"
