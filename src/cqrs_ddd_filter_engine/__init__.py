from .ast import (
    FieldSpecification,
    MembershipSpecification,
    PredicateSpecification,
    QuantifierSpecification,
)
from .base import (
    AndSpecification,
    BaseSpecification,
    NotSpecification,
    OrSpecification,
    TrueSpecification,
    and_all,
    or_all,
)
from .coercion import ValueCoercer, default_coercer, parse_enum
from .compiler import SpecificationCompiler, compile_specifications
from .config import CompilerOptions
from .domain import ISpecification
from .evaluator import MemoryOperator, MemoryOperatorRegistry
from .exceptions import (
    FieldNotFoundError,
    FilterSchemaError,
    NotACollectionError,
    OperatorNotFoundError,
    RelationshipTraversalError,
    SpecificationArgumentsError,
    SpecificationError,
    SpecificationNotRegisteredError,
    SpecificationRegistrationError,
    UnsupportedCustomTypeError,
    ValidationError,
    ValueCoercionError,
)
from .memory import InMemoryQuery, apply_query
from .model import (
    CompositeSpecification,
    FilterCriterion,
    FilterModel,
    OrderCriterion,
    SpecificationGroup,
    SpecificationLeaf,
)
from .model_builder import CustomFilterBuilder, FilterModelBuilder, spec, spec_group
from .operators import (
    FilterCustomType,
    FilterLogicOperator,
    FilterOperator,
    OrderDirection,
    PageSize,
)
from .operators_memory import build_default_registry
from .query_options import (
    FindOptions,
    HierarchyOption,
    IncludeOption,
    OrderOption,
    compile_options,
)
from .registry import SpecificationRegistry, default_registry, specification

__all__ = [
    # Core types
    "ISpecification",
    "BaseSpecification",
    "AndSpecification",
    "OrSpecification",
    "NotSpecification",
    "TrueSpecification",
    "and_all",
    "or_all",
    "FieldSpecification",
    "MembershipSpecification",
    "QuantifierSpecification",
    "PredicateSpecification",
    # Filter model
    "FilterOperator",
    "FilterLogicOperator",
    "FilterCustomType",
    "OrderDirection",
    "PageSize",
    "FilterModel",
    "FilterCriterion",
    "OrderCriterion",
    "CompositeSpecification",
    "SpecificationLeaf",
    "SpecificationGroup",
    # Builder
    "FilterModelBuilder",
    "CustomFilterBuilder",
    "spec",
    "spec_group",
    # Compilation
    "CompilerOptions",
    "SpecificationCompiler",
    "compile_specifications",
    "ValueCoercer",
    "default_coercer",
    "parse_enum",
    # Named specifications
    "SpecificationRegistry",
    "default_registry",
    "specification",
    # Query options
    "FindOptions",
    "OrderOption",
    "IncludeOption",
    "HierarchyOption",
    "compile_options",
    # In-memory evaluation
    "InMemoryQuery",
    "apply_query",
    "MemoryOperator",
    "MemoryOperatorRegistry",
    "build_default_registry",
    # Exceptions
    "SpecificationError",
    "ValidationError",
    "FilterSchemaError",
    "OperatorNotFoundError",
    "UnsupportedCustomTypeError",
    "ValueCoercionError",
    "FieldNotFoundError",
    "RelationshipTraversalError",
    "NotACollectionError",
    "SpecificationNotRegisteredError",
    "SpecificationRegistrationError",
    "SpecificationArgumentsError",
]
