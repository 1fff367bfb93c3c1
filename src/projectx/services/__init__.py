"""Service layer — business logic behind the API routes."""
