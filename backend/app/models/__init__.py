"""BizDesk - SQLAlchemy models."""
from app.models.estimate import Estimate
from app.models.product import Product
from app.models.user import User, UserRole

__all__ = [
    "Estimate",
    "Product",
    "User", "UserRole",
]
