"""HTTP webhook surface for workflow tools (n8n and friends)."""
