"""Service layer: business rules between routers and repositories."""
