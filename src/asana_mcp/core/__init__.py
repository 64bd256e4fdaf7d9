"""Core Asana client, data model and traversal algorithms for asana-mcp."""
