"""Core domain packages for triptrack."""
