"""Shrine of Secrets caching proxy."""
