"""Procurement request tracker: request lifecycle, combination and idea voting."""
