"""Command-line helpers that run proto2elm outside of ``protoc``."""
