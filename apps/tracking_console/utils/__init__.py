"""Helpers shared by the console pages."""
