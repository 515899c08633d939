"""Infrastructure layer: collaborator adapters, stores, database, prompts."""
