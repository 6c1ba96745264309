"""
Namespace enablement filters.

An enable spec is compiled into an allow matcher and an optional deny
matcher:

    "*"               everything
    "" / None         nothing
    "foo,bar:*"       foo (and descendants), anything under bar
    "foo | -foo:db"   foo and descendants, except exactly foo:db
    re.compile(...)   used as-is for allow (search semantics), no deny

Allowed tokens also match any ":"-delimited descendant. Denied tokens match
the full namespace only.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

ALL = "*"

_TOKEN_SPLIT_RE = re.compile(r"[\s,|]+")

EnableSpec = Union[str, "re.Pattern[str]", None]


def _token_to_regex(token: str) -> str:
    return re.escape(token).replace(r"\*", ".*?")


@dataclass(frozen=True)
class NamespaceFilter:
    """Compiled allow/deny pair. Build with compile_filter()."""
    allow: Union[str, "re.Pattern[str]", None] = None
    deny: Optional["re.Pattern[str]"] = None
    spec: EnableSpec = None

    def is_enabled(self, ns: Optional[str]) -> bool:
        allow = self.allow
        if allow is None:
            return False
        if not ns or allow == ALL:
            return True
        if not allow.search(ns):
            return False
        return self.deny is None or self.deny.fullmatch(ns) is None

    def describe(self) -> dict:
        return {
            "spec": self.spec.pattern if isinstance(self.spec, re.Pattern) else self.spec,
            "allow": self.allow.pattern if isinstance(self.allow, re.Pattern) else self.allow,
            "deny": self.deny.pattern if self.deny is not None else None,
        }


def compile_filter(spec: EnableSpec = None) -> NamespaceFilter:
    """Compile an enable spec. Raises TypeError for anything else."""
    if spec is None or spec == "":
        return NamespaceFilter(spec=spec)

    if isinstance(spec, re.Pattern):
        return NamespaceFilter(allow=spec, spec=spec)

    if not isinstance(spec, str):
        raise TypeError("Expected pattern to be a string or regex")

    if spec.strip() == ALL:
        return NamespaceFilter(allow=ALL, spec=spec)

    allows: list[str] = []
    denies: list[str] = []
    for token in _TOKEN_SPLIT_RE.split(spec):
        if not token:
            continue
        if token[0] == "-":
            if len(token) > 1:
                denies.append(_token_to_regex(token[1:]))
        else:
            allows.append(_token_to_regex(token))

    if allows:
        allow = re.compile(rf"^(?:{'|'.join(allows)})(?::.+)?$")
    elif denies:
        # only negations: everything not denied
        allow = re.compile(r".")
    else:
        return NamespaceFilter(spec=spec)

    deny = re.compile(rf"^(?:{'|'.join(denies)})$") if denies else None
    return NamespaceFilter(allow=allow, deny=deny, spec=spec)
