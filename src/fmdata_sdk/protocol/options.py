"""
Data API Option Compiler.

Pure functions turning high-level call arguments (scripts, portals, sort
specs, date-format mode, find queries) into the flat key/value or JSON
structures the wire protocol expects.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote

from ..types import DateFormat, ScriptType
from .specs import FindQueryItem, PortalSpec, ScriptSpec, SortSpec, coerce_spec


def url_encode_segment(raw: Any) -> str:
    """
    Trim and percent-encode a value for use as one URL path segment.

    Spaces become ``%20`` (never ``+``) and ``/`` is encoded too.

    Examples:
        url_encode_segment("  Accounts Table  ")  # "Accounts%20Table"
        url_encode_segment("a/b")                 # "a%2Fb"
    """
    return quote(str(raw).strip(), safe="")


def compile_scripts(scripts: Iterable[ScriptSpec | Mapping[str, Any]] | None) -> dict[str, str]:
    """
    Compile script specs into ``script*`` request keys.

    ``prerequest`` and ``presort`` always emit their ``.param`` key, even
    when empty. ``postrequest`` emits ``script.param`` only for a non-empty
    param: the server rejects a blank one. Unknown types are skipped.

    Example:
        compile_scripts([{"type": "postrequest", "name": "Log", "param": ""}])
        # {"script": "Log"}
    """
    compiled: dict[str, str] = {}
    for raw in scripts or []:
        script = coerce_spec(ScriptSpec, raw)
        param = "" if script.param is None else str(script.param)

        if script.type in (ScriptType.PREREQUEST.value, ScriptType.PRESORT.value):
            # server handling of a blank pre-request param is unverified; always sent
            compiled[f"script.{script.type}"] = script.name
            compiled[f"script.{script.type}.param"] = param
        elif script.type == ScriptType.POSTREQUEST.value:
            compiled["script"] = script.name
            if param != "":
                compiled["script.param"] = param
    return compiled


def compile_portals(
    portals: Iterable[PortalSpec | Mapping[str, Any]] | None,
    query_string: bool = False,
) -> dict[str, Any]:
    """
    Compile portal specs into ``portal`` plus per-portal paging keys.

    Args:
        portals: Portal specs; an empty input yields ``{}``
        query_string: Render for GET query parameters (``portal`` JSON
            encoded, keys prefixed ``_offset.`` / ``_limit.``) instead of
            a JSON body

    Example:
        compile_portals([{"name": "P", "limit": 5}])
        # {"portal": ["P"], "limit.P": 5}
    """
    specs = [coerce_spec(PortalSpec, raw) for raw in portals or []]
    if not specs:
        return {}

    prefix = "_" if query_string else ""
    compiled: dict[str, Any] = {}
    for portal in specs:
        if portal.offset is not None:
            compiled[f"{prefix}offset.{portal.name}"] = int(portal.offset)
        if portal.limit is not None:
            compiled[f"{prefix}limit.{portal.name}"] = int(portal.limit)

    names = [portal.name for portal in specs]
    compiled["portal"] = json.dumps(names) if query_string else names
    return compiled


def compile_date_format(mode: Any) -> dict[str, int]:
    """Map a ``DateFormat`` (or 0/1/2) to ``{"dateformats": n}``; anything else gives 0."""
    if isinstance(mode, bool):
        return {"dateformats": DateFormat.DEFAULT.value}
    try:
        return {"dateformats": DateFormat(mode).value}
    except ValueError:
        return {"dateformats": DateFormat.DEFAULT.value}


def _omit_flag(value: Any) -> str:
    if isinstance(value, str):
        return "true" if value.strip().lower() == "true" else "false"
    return "true" if value else "false"


def compile_find_query(query: Any) -> list[Any]:
    """
    Compile find query groups into the ``query`` array.

    A value that is not a list is sent as a single literal query (e.g. a
    ready-made ``{"Name": "==Smith"}`` dict). A list is read as groups of
    ``{"fields": [{"fieldname", "fieldvalue"}], "options": {"omit"}}``;
    each becomes a field to value object with ``omit`` set to ``"true"`` or
    ``"false"``.

    A group whose ``fields`` is absent or null ends compilation: it and
    every group after it are dropped, so a malformed list is silently
    truncated.
    """
    if not isinstance(query, list):
        return [query]

    compiled: list[Any] = []
    for group in query:
        if not isinstance(group, FindQueryItem):
            if not isinstance(group, Mapping) or group.get("fields") is None:
                break
            group = coerce_spec(FindQueryItem, group)

        item: dict[str, Any] = {field.fieldname: field.fieldvalue for field in group.fields}
        item["omit"] = _omit_flag(group.options.omit if group.options else False)
        compiled.append(item)
    return compiled


def compile_sort(
    sort: str | Iterable[SortSpec | Mapping[str, Any]] | None,
    query_string: bool = False,
) -> dict[str, Any]:
    """
    Compile sort specs into ``sort`` (JSON body) or ``_sort`` (GET query).

    A string is taken as an already encoded sort and passed through.
    """
    if sort is None:
        return {}
    key = "_sort" if query_string else "sort"
    if isinstance(sort, str):
        return {key: sort}

    rules = [coerce_spec(SortSpec, raw).to_wire() for raw in sort]
    if not rules:
        return {}
    return {key: json.dumps(rules) if query_string else rules}


def compile_response_layout(layout: str | None) -> dict[str, str]:
    """Ask the server to return field data from a different layout."""
    if not layout:
        return {}
    return {"layout.response": layout}


def compile_paging(offset: Any = None, limit: Any = None, query_string: bool = False) -> dict[str, int]:
    prefix = "_" if query_string else ""
    compiled: dict[str, int] = {}
    if offset is not None:
        compiled[f"{prefix}offset"] = int(offset)
    if limit is not None:
        compiled[f"{prefix}limit"] = int(limit)
    return compiled


def stringify_field_data(data: Mapping[str, Any]) -> dict[str, str]:
    """Send every field value as a string; ``None`` becomes ``""``."""
    return {name: "" if value is None else str(value) for name, value in data.items()}


__all__ = [
    "compile_date_format",
    "compile_find_query",
    "compile_paging",
    "compile_portals",
    "compile_response_layout",
    "compile_scripts",
    "compile_sort",
    "stringify_field_data",
    "url_encode_segment",
]
