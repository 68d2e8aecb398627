"""GitHub organization member activity report generator."""
