"""Infrastructure layer: filters, class introspection, reference container."""
