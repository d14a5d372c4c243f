"""Quiz core: configuration, domain models, contracts and services."""
