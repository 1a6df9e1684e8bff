"""Semantic versions for contracts: parsing, formatting and precedence."""
import enum
import logging
import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Any, Callable, Iterable, List, Optional, Tuple, TypeVar

from ..errors import VersionParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD], ASCII only; prerelease and build kept verbatim
VERSION_PATTERN = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+([0-9A-Za-z.-]+))?$", re.ASCII
)
IDENTIFIER_PATTERN = re.compile(r"[0-9A-Za-z.-]+", re.ASCII)

_RUN_PATTERN = re.compile(r"\d+|\D+", re.ASCII)


class VersionOrder(enum.IntEnum):
    """Outcome of comparing two versions."""
    LESS = -1
    EQUAL = 0
    GREATER = 1

    @classmethod
    def of(cls, value: int) -> "VersionOrder":
        if value < 0:
            return cls.LESS
        if value > 0:
            return cls.GREATER
        return cls.EQUAL

    def __str__(self) -> str:
        return self.name.lower()


def _prerelease_key(prerelease: str) -> Tuple[Tuple[Tuple[int, Any], ...], str]:
    """
    Sort key for prerelease strings.

    The string is split into runs of digits and non-digits. Digit runs
    compare numerically and sort before text runs, text runs compare by
    code point, and a run sequence that is a prefix of another sorts first.
    The raw string breaks ties such as "01" vs "1".
    """
    runs = tuple(
        (0, int(run)) if run.isdigit() else (1, run)
        for run in _RUN_PATTERN.findall(prerelease)
    )
    return runs, prerelease


def compare_prerelease(a: str, b: str) -> VersionOrder:
    """Numeric-aware comparison of two prerelease strings."""
    key_a, key_b = _prerelease_key(a), _prerelease_key(b)
    if key_a < key_b:
        return VersionOrder.LESS
    if key_a > key_b:
        return VersionOrder.GREATER
    return VersionOrder.EQUAL


@total_ordering
@dataclass(frozen=True, eq=False)
class ContractVersion:
    """
    Immutable semantic version.

    Ordering follows precedence: numeric major/minor/patch, then a stable
    release above any prerelease of the same triple, then the numeric-aware
    prerelease rule. Build metadata never takes part in ordering, equality
    or hashing; use ``identical`` to compare every field.
    """
    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    def __post_init__(self):
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Version component '{name}' must be an integer, got {type(value).__name__}")
            if value < 0:
                raise ValueError(f"Version component '{name}' must be non-negative, got {value}")
        for name in ("prerelease", "build"):
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, str) or not value:
                raise ValueError(f"Version {name} must be a non-empty string when given")
            if not IDENTIFIER_PATTERN.fullmatch(value):
                raise ValueError(f"Version {name} may only contain ASCII letters, digits, dots and hyphens: {value!r}")

    @classmethod
    def parse(cls, text: str) -> "ContractVersion":
        """
        Parse ``MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]``.

        Leading zeros in numeric components are accepted and read
        numerically. Anything else raises VersionParseError; there are no
        partial results.
        """
        if not isinstance(text, str):
            raise VersionParseError(text, f"expected a string, got {type(text).__name__}")
        match = VERSION_PATTERN.fullmatch(text)
        if not match:
            raise VersionParseError(text)
        major, minor, patch, prerelease, build = match.groups()
        return cls(int(major), int(minor), int(patch), prerelease, build)

    @classmethod
    def try_parse(cls, text: str) -> Optional["ContractVersion"]:
        """Parse, returning None instead of raising."""
        try:
            return cls.parse(text)
        except VersionParseError as e:
            logger.debug("Rejected version string: %s", e)
            return None

    @classmethod
    def from_dict(cls, data: dict) -> "ContractVersion":
        return cls(
            major=data["major"],
            minor=data["minor"],
            patch=data["patch"],
            prerelease=data.get("prerelease"),
            build=data.get("build"),
        )

    def to_dict(self) -> dict:
        """Decomposed wire form; absent prerelease/build are omitted."""
        result = {"major": self.major, "minor": self.minor, "patch": self.patch}
        if self.prerelease is not None:
            result["prerelease"] = self.prerelease
        if self.build is not None:
            result["build"] = self.build
        return result

    def format(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease is not None:
            text += f"-{self.prerelease}"
        if self.build is not None:
            text += f"+{self.build}"
        return text

    @property
    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def precedence_key(self) -> tuple:
        """Key whose natural ordering is version precedence."""
        if self.prerelease is None:
            tail = (1, ((), ""))
        else:
            tail = (0, _prerelease_key(self.prerelease))
        return (self.major, self.minor, self.patch) + tail

    def compare(self, other: "ContractVersion") -> VersionOrder:
        key_self, key_other = self.precedence_key(), other.precedence_key()
        if key_self < key_other:
            return VersionOrder.LESS
        if key_self > key_other:
            return VersionOrder.GREATER
        return VersionOrder.EQUAL

    def identical(self, other: "ContractVersion") -> bool:
        """True when every field matches, build included."""
        return (self.major, self.minor, self.patch, self.prerelease, self.build) == (
            other.major, other.minor, other.patch, other.prerelease, other.build
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContractVersion):
            return NotImplemented
        return self.precedence_key() == other.precedence_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ContractVersion):
            return NotImplemented
        return self.precedence_key() < other.precedence_key()

    def __hash__(self) -> int:
        return hash(self.precedence_key())

    def __str__(self) -> str:
        return self.format()


def parse_version(text: str) -> ContractVersion:
    return ContractVersion.parse(text)


def create_contract_version(major: int, minor: int, patch: int,
                            prerelease: Optional[str] = None,
                            build: Optional[str] = None) -> ContractVersion:
    return ContractVersion(major, minor, patch, prerelease, build)


def compare_versions(a: ContractVersion, b: ContractVersion) -> VersionOrder:
    """Return LESS, EQUAL or GREATER for ``a`` relative to ``b``."""
    return a.compare(b)


def sort_versions_descending(items: Iterable[T],
                             key: Optional[Callable[[T], ContractVersion]] = None) -> List[T]:
    """
    Newest first. Stable: items with equal precedence keep input order.

    ``key`` extracts the version from each item; items are taken to be
    versions themselves when it is omitted.
    """
    get_version = key or (lambda item: item)
    return sorted(items, key=lambda item: get_version(item).precedence_key(), reverse=True)


def latest_version(items: Iterable[T],
                   predicate: Optional[Callable[[T], bool]] = None,
                   key: Optional[Callable[[T], ContractVersion]] = None) -> Optional[T]:
    """Highest-precedence item accepted by ``predicate``; the first one wins ties."""
    get_version = key or (lambda item: item)
    best = None
    best_key = None
    for item in items:
        if predicate is not None and not predicate(item):
            continue
        item_key = get_version(item).precedence_key()
        if best_key is None or item_key > best_key:
            best, best_key = item, item_key
    return best
