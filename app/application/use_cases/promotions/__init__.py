"""Promotion use cases."""

from app.application.use_cases.promotions.promote_students import PromotionService

__all__ = ["PromotionService"]
