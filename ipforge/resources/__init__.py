"""Data files shipped with ipforge."""
