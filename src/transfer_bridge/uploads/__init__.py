"""Globus upload records and their hand-off to the file loader."""
