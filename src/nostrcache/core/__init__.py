"""Core event and filter models plus serialization helpers."""
