"""Bulk image-to-product processing."""
