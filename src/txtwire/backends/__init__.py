"""Vendor DNS API backends."""
