"""Packaged allow-list documents."""
