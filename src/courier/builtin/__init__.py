"""Builtin courier plugins."""
