"""Bundled data files for isosync."""
