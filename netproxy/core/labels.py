"""
Label selector parsing for lease objects.

Supports the Kubernetes selector grammar:

    key=value, key==value, key!=value
    key in (v1,v2), key notin (v1,v2)
    key, !key

Requirements are comma separated and all of them must match.
"""

import re
from dataclasses import dataclass
from typing import List, Mapping, Tuple

from netproxy.exceptions import LabelSelectorError

OP_EQUALS = "="
OP_NOT_EQUALS = "!="
OP_IN = "in"
OP_NOT_IN = "notin"
OP_EXISTS = "exists"
OP_DOES_NOT_EXIST = "!"

_NAME_MAX_LENGTH = 63
_PREFIX_MAX_LENGTH = 253

_NAME_RE = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_DNS_SUBDOMAIN_RE = re.compile(
    r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$"
)

_KEY = r"(?P<key>[^\s!=(),]+)"
_SET_RE = re.compile(rf"^{_KEY}\s+(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$")
_EQUALITY_RE = re.compile(rf"^{_KEY}\s*(?P<op>==|!=|=)\s*(?P<value>[^\s!=(),]*)$")
_NOT_EXISTS_RE = re.compile(rf"^!\s*{_KEY}$")
_EXISTS_RE = re.compile(rf"^{_KEY}$")


@dataclass(frozen=True)
class Requirement:
    """A single key/operator/values clause of a selector."""

    key: str
    operator: str
    values: Tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        if self.operator == OP_EXISTS:
            return self.key in labels
        if self.operator == OP_DOES_NOT_EXIST:
            return self.key not in labels
        if self.operator in (OP_EQUALS, OP_IN):
            return self.key in labels and labels[self.key] in self.values
        # != and notin also match when the key is absent
        return self.key not in labels or labels[self.key] not in self.values

    def __str__(self) -> str:
        if self.operator == OP_EXISTS:
            return self.key
        if self.operator == OP_DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator in (OP_IN, OP_NOT_IN):
            return f"{self.key} {self.operator} ({','.join(self.values)})"
        return f"{self.key}{self.operator}{self.values[0]}"


@dataclass(frozen=True)
class LabelSelector:
    """A parsed selector; matches a label set when every requirement does."""

    requirements: Tuple[Requirement, ...]

    def matches(self, labels: Mapping[str, str]) -> bool:
        return all(requirement.matches(labels) for requirement in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(requirement) for requirement in self.requirements)


def _validate_key(key: str) -> None:
    prefix, _, name = key.rpartition("/")
    if "/" in key:
        if not prefix or len(prefix) > _PREFIX_MAX_LENGTH or not _DNS_SUBDOMAIN_RE.match(prefix):
            raise LabelSelectorError(
                f"invalid label key {key!r}: prefix must be a DNS subdomain "
                f"of at most {_PREFIX_MAX_LENGTH} characters"
            )
    if len(name) > _NAME_MAX_LENGTH or not _NAME_RE.match(name):
        raise LabelSelectorError(
            f"invalid label key {key!r}: name must be at most {_NAME_MAX_LENGTH} "
            "alphanumeric characters, '-', '_' or '.', starting and ending "
            "with an alphanumeric character"
        )


def _validate_value(key: str, value: str) -> None:
    if value == "":
        return
    if len(value) > _NAME_MAX_LENGTH or not _NAME_RE.match(value):
        raise LabelSelectorError(
            f"invalid label value {value!r} for key {key!r}: must be at most "
            f"{_NAME_MAX_LENGTH} alphanumeric characters, '-', '_' or '.', "
            "starting and ending with an alphanumeric character"
        )


def _split_requirements(selector: str) -> List[str]:
    """Split on commas that are not inside a parenthesised value set."""
    parts = []
    depth = 0
    current = []
    for char in selector:
        if char == "(":
            depth += 1
            if depth > 1:
                raise LabelSelectorError(f"unexpected '(' in selector {selector!r}")
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise LabelSelectorError(f"unbalanced ')' in selector {selector!r}")
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    if depth != 0:
        raise LabelSelectorError(f"unbalanced '(' in selector {selector!r}")
    parts.append("".join(current).strip())
    return parts


def _parse_requirement(text: str) -> Requirement:
    if not text:
        raise LabelSelectorError("found empty requirement in label selector")

    match = _SET_RE.match(text)
    if match:
        key = match.group("key")
        values = tuple(value.strip() for value in match.group("values").split(","))
        if values == ("",):
            raise LabelSelectorError(f"{key}: for 'in' and 'notin' operators, values set can't be empty")
        _validate_key(key)
        for value in values:
            _validate_value(key, value)
        return Requirement(key, match.group("op"), values)

    match = _EQUALITY_RE.match(text)
    if match:
        key = match.group("key")
        value = match.group("value")
        _validate_key(key)
        _validate_value(key, value)
        op = OP_NOT_EQUALS if match.group("op") == "!=" else OP_EQUALS
        return Requirement(key, op, (value,))

    match = _NOT_EXISTS_RE.match(text)
    if match:
        _validate_key(match.group("key"))
        return Requirement(match.group("key"), OP_DOES_NOT_EXIST)

    match = _EXISTS_RE.match(text)
    if match:
        _validate_key(match.group("key"))
        return Requirement(match.group("key"), OP_EXISTS)

    raise LabelSelectorError(f"unable to parse requirement {text!r}")


def parse_label_selector(selector: str) -> LabelSelector:
    """
    Parse a label selector string.

    Args:
        selector: Selector text, e.g. "k8s-app=konnectivity-server"

    Returns:
        Parsed selector

    Raises:
        LabelSelectorError: If the selector is empty or malformed
    """
    if not selector or not selector.strip():
        raise LabelSelectorError("label selector cannot be empty")

    requirements = tuple(_parse_requirement(part) for part in _split_requirements(selector))
    return LabelSelector(requirements)
