"""Domain layer: entities, ports and the ingestion services built on them."""
