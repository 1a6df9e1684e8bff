"""Descriptive metadata attached to every contract."""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from ..errors import DocumentFormatError


@dataclass(frozen=True)
class ContractMetadata:
    """
    Author, tags, documentation link and deprecation state.

    ``deprecated`` is None when the field was never set, which lets a merge
    tell "not given" apart from an explicit False. ``deprecation_reason``
    is accepted even when the contract is not deprecated.
    """
    author: Optional[str] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    documentation_url: Optional[str] = None
    deprecated: Optional[bool] = None
    deprecation_reason: Optional[str] = None

    def __post_init__(self):
        # lists from callers are frozen into tuples
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags or ()))

    @property
    def is_deprecated(self) -> bool:
        return self.deprecated is True

    def with_defaults(self, author: str = "Unknown") -> "ContractMetadata":
        """Fill in author/deprecated the way new contracts are stamped."""
        return replace(
            self,
            author=self.author if self.author is not None else author,
            deprecated=bool(self.deprecated),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"tags": list(self.tags)}
        if self.author is not None:
            result["author"] = self.author
        if self.documentation_url is not None:
            result["documentationUrl"] = self.documentation_url
        if self.deprecated is not None:
            result["deprecated"] = self.deprecated
        if self.deprecation_reason is not None:
            result["deprecationReason"] = self.deprecation_reason
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ContractMetadata":
        data = data or {}
        tags = data.get("tags") or ()
        if not isinstance(tags, (list, tuple)):
            raise DocumentFormatError(f"Field 'metadata.tags' must be a list, got {type(tags).__name__}")
        return cls(
            author=data.get("author"),
            tags=tuple(tags),
            documentation_url=data.get("documentationUrl"),
            deprecated=data.get("deprecated"),
            deprecation_reason=data.get("deprecationReason"),
        )


def _union_tags(*groups: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    for group in groups:
        seen.update(group)
    return tuple(sorted(seen))


def merge_metadata(base: ContractMetadata, override: ContractMetadata) -> ContractMetadata:
    """
    Merge two metadata values into a new one.

    Scalar fields take the override when it is set, else the base. Tags
    become the sorted, de-duplicated union of both sides. Neither operand
    is modified.
    """
    def pick(name: str):
        value = getattr(override, name)
        return value if value is not None else getattr(base, name)

    return ContractMetadata(
        author=pick("author"),
        tags=_union_tags(base.tags, override.tags),
        documentation_url=pick("documentation_url"),
        deprecated=pick("deprecated"),
        deprecation_reason=pick("deprecation_reason"),
    )
