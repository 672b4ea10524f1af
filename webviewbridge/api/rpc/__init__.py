"""Command handlers and dispatch plumbing."""
