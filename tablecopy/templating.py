"""
templating
==========

``${tag}`` substitution used to build the bulk-copy command lines.

Two token forms are supported:

- ``${name}``: looks up ``tags[name]``
- ``${group.name}``: looks up ``tags[group][name]`` (one level only)

Examples
--------
>>> render("${firstName} ${lastName}", {"firstName": "John", "lastName": "Doe"})
'John Doe'
>>> render("${user.firstName}", {"user": {"firstName": "John"}})
'John'
>>> render("${missing}!", {}, keep_missing_tags=True)
'${missing}!'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Pattern, Union

DEFAULT_TEMPLATE: Pattern[str] = re.compile(r"\$\{(?:(?P<group>\w+)\.)?(?P<name>\w+)\}")

Scalar = Union[str, int, float, bool, None]
_SCALARS = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class TagSet:
    """Validated tag values: flat scalars plus one level of named groups."""

    flat: Dict[str, Scalar] = field(default_factory=dict)
    groups: Dict[str, Dict[str, Scalar]] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, tags: Mapping[str, Any]) -> "TagSet":
        """Split *tags* into flat values and groups.

        Raises
        ------
        TypeError
            If a key is not a string, or a value is neither a scalar nor a
            mapping of scalars.
        """
        flat: Dict[str, Scalar] = {}
        groups: Dict[str, Dict[str, Scalar]] = {}
        for key, value in tags.items():
            if not isinstance(key, str):
                raise TypeError(f"tag names must be strings, got {key!r}")
            if isinstance(value, _SCALARS):
                flat[key] = value
            elif isinstance(value, Mapping):
                group: Dict[str, Scalar] = {}
                for sub_key, sub_value in value.items():
                    if not isinstance(sub_key, str) or not isinstance(sub_value, _SCALARS):
                        raise TypeError(f"tag group {key!r} may only hold scalar values, got {sub_key!r}")
                    group[sub_key] = sub_value
                groups[key] = group
            else:
                raise TypeError(f"unsupported value for tag {key!r}: {type(value).__name__}")
        return cls(flat=flat, groups=groups)

    @classmethod
    def coerce(cls, tags: Mapping[Any, Any]) -> "TagSet":
        """Like :meth:`from_mapping`, but stringify values it would reject.

        Lists become comma-joined text and anything nested below a group is
        rendered with :func:`to_text`, so building never fails.
        """
        flat: Dict[str, Scalar] = {}
        groups: Dict[str, Dict[str, Scalar]] = {}
        for key, value in tags.items():
            if isinstance(value, _SCALARS):
                flat[str(key)] = value
            elif isinstance(value, Mapping):
                groups[str(key)] = {
                    str(k): v if isinstance(v, _SCALARS) else to_text(v) for k, v in value.items()
                }
            else:
                flat[str(key)] = to_text(value)
        return cls(flat=flat, groups=groups)

    def lookup(self, group: Optional[str], name: str) -> Scalar:
        """Return the value for a token, or None if it is not defined."""
        if group:
            return self.groups.get(group, {}).get(name)
        return self.flat.get(name)


def to_text(value: Any) -> str:
    """Stringify a tag value (booleans as ``true``/``false``, lists comma-joined)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    return str(value)


def render(
    source: str,
    tags: Union[TagSet, Mapping[str, Any], None],
    keep_missing_tags: bool = False,
    template: Union[str, Pattern[str]] = DEFAULT_TEMPLATE,
) -> str:
    """Replace ``${...}`` tokens in *source* with values from *tags*.

    Parameters
    ----------
    source:
        Text containing tokens.
    tags:
        A :class:`TagSet` or a plain mapping (converted via
        :meth:`TagSet.coerce`, so unexpected value types never raise).
    keep_missing_tags:
        Keep the literal token text for undefined tags instead of removing it.
    template:
        Token pattern with a ``name`` group and an optional ``group`` group.

    Returns
    -------
    str
        *source* with every token substituted once; values are not re-scanned.
    """
    if not source or tags is None:
        return source
    if not isinstance(tags, TagSet):
        tags = TagSet.coerce(tags)
    pattern = re.compile(template) if isinstance(template, str) else template

    def _replace(match: "re.Match[str]") -> str:
        found = match.groupdict()
        value = tags.lookup(found.get("group"), found["name"])
        if value is None:
            return match.group(0) if keep_missing_tags else ""
        return to_text(value)

    return pattern.sub(_replace, source)
