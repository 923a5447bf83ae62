"""Membership grants and their lifecycle."""
