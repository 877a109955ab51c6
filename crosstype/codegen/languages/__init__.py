"""Language-specific code generators."""
