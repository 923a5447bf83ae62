"""Vulcan authorization and membership API."""
