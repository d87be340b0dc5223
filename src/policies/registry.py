"""Per-category scoring policies for club contests.

A policy fixes three things for an event:
- how many attempts a contestant is expected to submit,
- how those attempts reduce to a single ranked result,
- how values are written (seconds, extended clock times, or move counts).

Policies are held by an immutable `PolicyRegistry`. Unknown category names
resolve to the registry's default policy rather than failing; callers that
want stricter handling can ask `is_known()` first.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping


logger = logging.getLogger(__name__)


class ScoringMethod(str, Enum):
    """How a list of attempts becomes one comparable result."""

    BEST_SINGLE = "single"
    MEAN_OF_N = "mean"
    TRIMMED_AVERAGE_OF_N = "average"
    BEST_SINGLE_WITH_MEAN_OF_N = "single_with_mean"

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]

    @classmethod
    def _missing_(cls, value: object) -> "ScoringMethod | None":
        # Method codes used by older contest sheets.
        return _LEGACY_METHODS.get(str(value).lower())


_METHOD_LABELS = {
    ScoringMethod.BEST_SINGLE: "best single",
    ScoringMethod.MEAN_OF_N: "mean",
    ScoringMethod.TRIMMED_AVERAGE_OF_N: "average",
    ScoringMethod.BEST_SINGLE_WITH_MEAN_OF_N: "best single",
}

_LEGACY_METHODS = {
    "ao5": ScoringMethod.TRIMMED_AVERAGE_OF_N,
    "mo3": ScoringMethod.MEAN_OF_N,
    "single_with_mo3": ScoringMethod.BEST_SINGLE_WITH_MEAN_OF_N,
}


class ValueFormat(str, Enum):
    """Textual convention used to enter and display values."""

    STANDARD_TIME = "standard"
    EXTENDED_TIME = "extended"
    MOVE_COUNT = "moves"


@dataclass(frozen=True)
class CategoryPolicy:
    """Scoring configuration for one event."""

    attempts: int = 5
    scoring_method: ScoringMethod = ScoringMethod.TRIMMED_AVERAGE_OF_N
    value_format: ValueFormat = ValueFormat.STANDARD_TIME
    display_name: str = ""
    description: str = ""
    group: str = ""
    allows_dnf: bool = True
    allows_penalty: bool = True

    @property
    def is_move_count(self) -> bool:
        return self.value_format is ValueFormat.MOVE_COUNT

    @property
    def method_label(self) -> str:
        """Method name with the attempt count where it matters, e.g. ``"average of 5"``."""

        if self.scoring_method in (ScoringMethod.MEAN_OF_N, ScoringMethod.TRIMMED_AVERAGE_OF_N):
            return f"{self.scoring_method.label} of {self.attempts}"
        return self.scoring_method.label

    def validate(self) -> None:
        if self.attempts <= 0:
            raise ValueError("attempts must be positive.")
        if self.scoring_method is ScoringMethod.TRIMMED_AVERAGE_OF_N and self.attempts < 3:
            raise ValueError("A trimmed average needs at least 3 attempts.")

    def describe(self) -> str:
        """Return a one-line human readable description of the policy."""

        if self.description:
            return self.description
        return f"{self.attempts} attempts, ranked by {self.method_label}"

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, name: str = "") -> "CategoryPolicy":
        value_format = ValueFormat(payload.get("value_format", ValueFormat.STANDARD_TIME.value))
        is_moves = value_format is ValueFormat.MOVE_COUNT
        policy = cls(
            attempts=int(payload.get("attempts", 5)),
            scoring_method=ScoringMethod(
                payload.get("scoring_method", ScoringMethod.TRIMMED_AVERAGE_OF_N.value)
            ),
            value_format=value_format,
            display_name=str(payload.get("display_name", name)),
            description=str(payload.get("description", "")),
            group=str(payload.get("group", "")),
            allows_dnf=bool(payload.get("allows_dnf", not is_moves)),
            allows_penalty=bool(payload.get("allows_penalty", not is_moves)),
        )
        policy.validate()
        return policy


DEFAULT_POLICY = CategoryPolicy(
    attempts=5,
    scoring_method=ScoringMethod.TRIMMED_AVERAGE_OF_N,
    value_format=ValueFormat.STANDARD_TIME,
    description="Default: 5 attempts, best and worst dropped, mean of the middle 3.",
)


class PolicyRegistry(Mapping[str, CategoryPolicy]):
    """Read-only lookup from category name to `CategoryPolicy`."""

    def __init__(
        self,
        policies: Mapping[str, CategoryPolicy],
        *,
        aliases: Mapping[str, str] | None = None,
        default: CategoryPolicy = DEFAULT_POLICY,
        input_examples: Mapping[str, str] | None = None,
    ) -> None:
        for name, policy in policies.items():
            if not name:
                raise ValueError("Category names must be non-empty.")
            policy.validate()
        default.validate()

        aliases = dict(aliases or {})
        for alias, target in aliases.items():
            if target not in policies:
                raise ValueError(f"Alias {alias!r} points at unknown category {target!r}.")

        self._policies = MappingProxyType(dict(policies))
        self._aliases = MappingProxyType(aliases)
        self._default = default
        self._input_examples = MappingProxyType(dict(input_examples or {}))

    @property
    def default(self) -> CategoryPolicy:
        return self._default

    def __getitem__(self, name: str) -> CategoryPolicy:
        return self._policies[self.canonical_name(name)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._policies)

    def __len__(self) -> int:
        return len(self._policies)

    def canonical_name(self, name: str) -> str:
        """Resolve an alias to its registered category name."""

        return self._aliases.get(name, name)

    def is_known(self, name: str) -> bool:
        return self.canonical_name(name) in self._policies

    def get(self, name: str, default: CategoryPolicy | None = None) -> CategoryPolicy:  # type: ignore[override]
        """Return the policy for `name`, falling back to the default policy."""

        canonical = self.canonical_name(name)
        policy = self._policies.get(canonical)
        if policy is not None:
            return policy
        fallback = default if default is not None else self._default
        logger.debug("Unknown category %r, using default policy.", name)
        if fallback.display_name:
            return fallback
        return replace(fallback, display_name=name)

    def categories(self) -> list[str]:
        return list(self._policies)

    def groups(self) -> dict[str, list[str]]:
        """Category names grouped by their `group`, in declaration order."""

        grouped: dict[str, list[str]] = {}
        for name, policy in self._policies.items():
            grouped.setdefault(policy.group or "other", []).append(name)
        return grouped

    def input_example(self, name: str) -> str:
        """Example entry line shown as an input hint for `name`."""

        canonical = self.canonical_name(name)
        example = self._input_examples.get(canonical)
        if example is not None:
            return example
        return _DEFAULT_INPUT_EXAMPLE

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PolicyRegistry":
        categories = payload.get("categories")
        if not isinstance(categories, Mapping):
            raise ValueError("Policy table must contain a 'categories' object.")

        policies = {
            str(name): CategoryPolicy.from_dict(body, name=str(name))
            for name, body in categories.items()
        }
        default_body = payload.get("default")
        default = (
            CategoryPolicy.from_dict(default_body) if isinstance(default_body, Mapping) else DEFAULT_POLICY
        )
        examples = {
            str(name): str(body["example"])
            for name, body in categories.items()
            if isinstance(body, Mapping) and "example" in body
        }
        return cls(
            policies,
            aliases={str(k): str(v) for k, v in dict(payload.get("aliases") or {}).items()},
            default=default,
            input_examples=examples,
        )

    @classmethod
    def from_json(cls, path: str | Path) -> "PolicyRegistry":
        policy_path = Path(path)
        if not policy_path.exists():
            raise FileNotFoundError(f"Missing policy file: {policy_path}")
        with policy_path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object in {policy_path}.")
        return cls.from_dict(payload)


_DEFAULT_INPUT_EXAMPLE = "5.89 6.12+ 5.45 DNF 6.01"

_AO5 = "5 attempts, best and worst dropped, mean of the middle 3."
_MO3 = "3 attempts, plain mean; any DNF makes the mean DNF."
_BLD = "3 attempts, ranked by best single; the mean of 3 is shown alongside."


def _speed(name: str, value_format: ValueFormat = ValueFormat.STANDARD_TIME) -> CategoryPolicy:
    return CategoryPolicy(
        attempts=5,
        scoring_method=ScoringMethod.TRIMMED_AVERAGE_OF_N,
        value_format=value_format,
        display_name=name,
        description=_AO5,
        group="speed",
    )


def _build_club_policies() -> dict[str, CategoryPolicy]:
    policies = {
        "3x3": _speed("3x3"),
        "2x2": _speed("2x2"),
        "4x4": _speed("4x4", ValueFormat.EXTENDED_TIME),
        "5x5": _speed("5x5", ValueFormat.EXTENDED_TIME),
        "3x3 One-Handed": _speed("3x3 One-Handed"),
    }
    for name in ("6x6", "7x7"):
        policies[name] = CategoryPolicy(
            attempts=3,
            scoring_method=ScoringMethod.MEAN_OF_N,
            value_format=ValueFormat.EXTENDED_TIME,
            display_name=name,
            description=_MO3,
            group="big cubes",
        )
    for name in ("3x3 Blindfolded", "4x4 Blindfolded", "5x5 Blindfolded"):
        policies[name] = CategoryPolicy(
            attempts=3,
            scoring_method=ScoringMethod.BEST_SINGLE_WITH_MEAN_OF_N,
            value_format=ValueFormat.EXTENDED_TIME,
            display_name=name,
            description=_BLD,
            group="blindfolded",
            allows_penalty=False,
        )
    policies["Fewest Moves"] = CategoryPolicy(
        attempts=3,
        scoring_method=ScoringMethod.MEAN_OF_N,
        value_format=ValueFormat.MOVE_COUNT,
        display_name="Fewest Moves",
        description="3 attempts counted in moves, mean to two decimals; any DNF makes the mean DNF.",
        group="special",
        allows_dnf=False,
        allows_penalty=False,
    )
    for name, value_format in (
        ("Clock", ValueFormat.STANDARD_TIME),
        ("Megaminx", ValueFormat.EXTENDED_TIME),
        ("Pyraminx", ValueFormat.STANDARD_TIME),
        ("Skewb", ValueFormat.STANDARD_TIME),
        ("Square-1", ValueFormat.STANDARD_TIME),
    ):
        policies[name] = CategoryPolicy(
            attempts=5,
            scoring_method=ScoringMethod.TRIMMED_AVERAGE_OF_N,
            value_format=value_format,
            display_name=name,
            description=_AO5,
            group="special",
        )
    return policies


# Event names used by the club's historical contest sheets.
CLUB_ALIASES = {
    "三阶": "3x3",
    "二阶": "2x2",
    "四阶": "4x4",
    "五阶": "5x5",
    "三阶单手": "3x3 One-Handed",
    "六阶": "6x6",
    "七阶": "7x7",
    "三阶盲拧": "3x3 Blindfolded",
    "四阶盲拧": "4x4 Blindfolded",
    "五阶盲拧": "5x5 Blindfolded",
    "最少步": "Fewest Moves",
    "魔表": "Clock",
    "五魔方": "Megaminx",
    "金字塔": "Pyraminx",
    "斜转": "Skewb",
    "SQ1": "Square-1",
}

CLUB_INPUT_EXAMPLES = {
    "3x3": "5.89 6.12+ 5.45 DNF 6.01",
    "2x2": "1.23 2.45+ 1.89 2.01 DNF",
    "4x4": "45.67 1:02.34+ 50.12 DNF 55.89",
    "5x5": "1:25.67 1:35.12+ 1:30.45 DNF 1:28.90",
    "6x6": "2:45.67 3:02.34 2:55.12",
    "7x7": "4:15.67 4:35.12 4:25.45",
    "3x3 Blindfolded": "1:25.67 DNF 1:35.12",
    "4x4 Blindfolded": "5:25.67 DNF 6:15.34",
    "5x5 Blindfolded": "12:45.67 DNF 15:20.12",
    "Fewest Moves": "25 30 28",
}


def default_registry() -> PolicyRegistry:
    """Build the club's standard policy table."""

    return PolicyRegistry(
        _build_club_policies(),
        aliases=CLUB_ALIASES,
        input_examples=CLUB_INPUT_EXAMPLES,
    )


_STANDARD_REGISTRY = default_registry()


def get_policy(category: str, registry: PolicyRegistry | None = None) -> CategoryPolicy:
    """Return the policy for `category`; unknown names get the default policy."""

    return (registry or _STANDARD_REGISTRY).get(category)


def is_known_category(category: str, registry: PolicyRegistry | None = None) -> bool:
    return (registry or _STANDARD_REGISTRY).is_known(category)
