from .specification import ISpecification

__all__ = ["ISpecification"]
