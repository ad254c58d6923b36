"""Producer domain: validation rules, use cases and dashboard aggregates."""
