"""Access token extraction, local verification, introspection and orchestration."""
