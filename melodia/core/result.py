"""
Result Pattern Implementation
Type-safe outcome for repository writes and Suno client calls
"""

from typing import Generic, TypeVar, Optional
from pydantic import BaseModel

T = TypeVar('T')


class Result(BaseModel, Generic[T]):
    """Result type for type-safe error handling"""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    not_found: bool = False

    @classmethod
    def ok(cls, data: T = None) -> 'Result[T]':
        """Create a successful result"""
        return cls(success=True, data=data)

    @classmethod
    def err(cls, error: str) -> 'Result[T]':
        """Create an error result"""
        return cls(success=False, error=error)

    @classmethod
    def missing(cls, error: str) -> 'Result[T]':
        """Create a result for a row that does not exist (distinct from an I/O error)"""
        return cls(success=False, error=error, not_found=True)

    def is_ok(self) -> bool:
        return self.success

    def is_err(self) -> bool:
        return not self.success

    def unwrap(self) -> T:
        """Unwrap successful result or raise on error"""
        if self.success:
            return self.data
        raise ValueError(f"Result unwrap failed: {self.error}")

    model_config = {"arbitrary_types_allowed": True}
