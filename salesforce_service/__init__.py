"""Salesforce-style account, contact and cart service."""

__version__ = "0.1.0"
