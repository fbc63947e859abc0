"""Service layer: business operations over the listing store."""
