from .route_validator import ExpectedRoute, ValidatedRoute, validate

__all__ = ["ExpectedRoute", "ValidatedRoute", "validate"]
