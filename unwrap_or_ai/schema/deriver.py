"""Derive a JSON schema describing a recovery target type.

Purpose
-------
Turn an arbitrary Python type (pydantic model, dataclass, TypedDict, scalar,
list, ...) into a :class:`TargetSchema`: a JSON-Schema object usable as the
``response_format.json_schema.schema`` of a chat-completions request, paired
with the pydantic ``TypeAdapter`` that deserializes the backend's answer back
into that type.

External dependencies
---------------------
- ``pydantic`` generates the raw schema and performs strict validation.
- No I/O.

Normalization
-------------
- ``$ref`` / ``$defs`` are inlined (recursive types keep their ``$defs``).
- Node-level ``title`` keys are dropped; ``description`` is kept.
- Object nodes with declared ``properties`` get ``additionalProperties: false``.
- Non-object roots are wrapped as ``{"value": <schema>}`` and unwrapped when
  the answer is validated.

Derivation is a pure function of the type, so results are cached by type
identity.
"""

from __future__ import annotations

import json
import re
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple, get_origin

from pydantic import ConfigDict, PydanticUserError, TypeAdapter, ValidationError, create_model

from ..base.constants import DEFAULT_SCHEMA_NAME, WRAPPED_VALUE_KEY
from ..base.errors import SchemaDerivationError

_NAME_RE = re.compile(r"[^a-zA-Z0-9_-]+")
_MAX_NAME_LEN = 64

_CACHE: Dict[Any, "TargetSchema"] = {}
_CACHE_LOCK = threading.Lock()


@dataclass(frozen=True)
class TargetSchema:
    """Structural description of a recovery target type.

    Attributes:
        name: Schema name sent as ``json_schema.name`` (lowercased type name).
        schema: JSON-Schema object body.
        wrapped: True when the target is not an object and the schema wraps
            it under a single ``value`` property.
        target: The Python type the schema describes.
    """

    name: str
    schema: Dict[str, Any]
    wrapped: bool
    target: Any = field(compare=False)
    _adapter: TypeAdapter = field(compare=False, repr=False)

    @property
    def properties(self) -> Dict[str, Any]:
        return dict(self.schema.get("properties", {}))

    @property
    def required(self) -> FrozenSet[str]:
        return frozenset(self.schema.get("required", ()))

    def response_format(self) -> Dict[str, Any]:
        """Return the ``response_format`` request parameter for this schema."""
        return {
            "type": "json_schema",
            "json_schema": {"name": self.name, "schema": self.schema},
        }

    def validate_json(self, text: str) -> Any:
        """Strictly deserialize backend output into the target type.

        Raises:
            pydantic.ValidationError: when ``text`` is not valid JSON or does
                not conform to the target type. Values are not coerced
                (``"123"`` is not accepted for an ``int`` field) and keys
                a closed object does not declare are rejected at any depth.
        """
        value = self._adapter.validate_json(text, strict=True)
        extras = _undeclared_keys(json.loads(text), self.schema, self.schema.get("$defs", {}), ())
        if extras:
            raise ValidationError.from_exception_data(
                self.name,
                [{"type": "extra_forbidden", "loc": loc, "input": item} for loc, item in extras],
            )
        if self.wrapped:
            return getattr(value, WRAPPED_VALUE_KEY)
        return value

    def dump_json(self, value: Any) -> str:
        """Serialize a target value to JSON text matching this schema."""
        if self.wrapped:
            return json.dumps({WRAPPED_VALUE_KEY: TypeAdapter(self.target).dump_python(value, mode="json")})
        return self._adapter.dump_json(value).decode("utf-8")


_Extra = Tuple[Tuple[Any, ...], Any]
_JSON_TYPES = {
    "object": dict,
    "array": list,
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "null": type(None),
}


def _fits(data: Any, node: Mapping[str, Any]) -> bool:
    declared = node.get("type")
    if not isinstance(declared, str) or declared not in _JSON_TYPES:
        return True
    return isinstance(data, _JSON_TYPES[declared])


def _undeclared_keys(data: Any, node: Any, defs: Mapping[str, Any], loc: Tuple[Any, ...]) -> List[_Extra]:
    """Return ``(location, value)`` for every key a closed object node does not declare."""
    if not isinstance(node, dict):
        return []
    ref = node.get("$ref")
    if isinstance(ref, str):
        _, target = _resolve_ref(ref, defs)
        return _undeclared_keys(data, target, defs, loc) if target is not None else []

    for combinator in ("anyOf", "oneOf", "allOf"):
        branches = [b for b in node.get(combinator, ()) if isinstance(b, dict)]
        if not branches:
            continue
        found = [_undeclared_keys(data, b, defs, loc) for b in branches if "$ref" in b or _fits(data, b)]
        if combinator == "allOf":
            return [extra for sub in found for extra in sub]
        if not found or any(not sub for sub in found):
            return []
        return found[0]

    out: List[_Extra] = []
    if isinstance(data, dict):
        props = node.get("properties")
        if isinstance(props, dict):
            for key, item in data.items():
                if key in props:
                    out.extend(_undeclared_keys(item, props[key], defs, loc + (key,)))
                elif node.get("additionalProperties") is False:
                    out.append((loc + (key,), item))
        elif isinstance(node.get("additionalProperties"), dict):
            for key, item in data.items():
                out.extend(_undeclared_keys(item, node["additionalProperties"], defs, loc + (key,)))
    elif isinstance(data, list) and isinstance(node.get("items"), dict):
        for index, item in enumerate(data):
            out.extend(_undeclared_keys(item, node["items"], defs, loc + (index,)))
    return out


def schema_name(tp: Any) -> str:
    """Return the schema name for ``tp``: its lowercased type name.

    Generic aliases use their origin's name (``list[int]`` -> ``list``).
    Characters outside ``[a-zA-Z0-9_-]`` are replaced and the result is
    limited to 64 characters.
    """
    raw = getattr(tp, "__name__", None)
    if not isinstance(raw, str):
        origin = get_origin(tp)
        raw = getattr(origin, "__name__", None) or getattr(tp, "_name", None)
    if not isinstance(raw, str) or not raw:
        return DEFAULT_SCHEMA_NAME
    cleaned = _NAME_RE.sub("_", raw.split(".")[-1]).strip("_").lower()
    return cleaned[:_MAX_NAME_LEN] or DEFAULT_SCHEMA_NAME


def _resolve_ref(ref: str, defs: Mapping[str, Any]) -> Tuple[str, Optional[Dict[str, Any]]]:
    key = ref.rsplit("/", 1)[-1]
    return key, defs.get(key)


def _normalize(node: Any, defs: Mapping[str, Any], stack: Tuple[str, ...], recursive: Set[str]) -> Any:
    """Return a normalized copy of a schema node."""
    if isinstance(node, list):
        return [_normalize(n, defs, stack, recursive) for n in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        key, target = _resolve_ref(ref, defs)
        if target is None or key in stack:
            recursive.add(key)
            return {"$ref": ref}
        merged = {k: v for k, v in node.items() if k != "$ref"}
        inlined = _normalize(target, defs, stack + (key,), recursive)
        inlined.update(_normalize(merged, defs, stack, recursive))
        return inlined

    out: Dict[str, Any] = {}
    for key, value in node.items():
        if key in ("title", "$defs"):
            continue
        if key == "properties" and isinstance(value, dict):
            out[key] = {name: _normalize(sub, defs, stack, recursive) for name, sub in value.items()}
        else:
            out[key] = _normalize(value, defs, stack, recursive)
    if out.get("type") == "object" and "properties" in out:
        out.setdefault("additionalProperties", False)
    return out


def _build_adapter(tp: Any) -> Tuple[TypeAdapter, Dict[str, Any]]:
    try:
        adapter = TypeAdapter(tp)
        raw = adapter.json_schema()
    except PydanticUserError as exc:
        raise SchemaDerivationError(f"cannot derive a schema for {tp!r}: {exc}") from exc
    return adapter, raw


def _normalize_root(raw: Dict[str, Any]) -> Dict[str, Any]:
    defs = raw.get("$defs", {})
    recursive: Set[str] = set()
    schema = _normalize(raw, defs, (), recursive)
    if recursive:
        schema["$defs"] = {k: _normalize(defs[k], defs, (k,), set()) for k in sorted(recursive) if k in defs}
    return schema


def _derive(tp: Any) -> TargetSchema:
    adapter, raw = _build_adapter(tp)
    schema = _normalize_root(raw)
    name = schema_name(tp)
    if schema.get("type") == "object":
        return TargetSchema(name=name, schema=schema, wrapped=False, target=tp, _adapter=adapter)

    envelope = create_model(
        f"{name}_envelope",
        __config__=ConfigDict(extra="forbid"),
        **{WRAPPED_VALUE_KEY: (tp, ...)},
    )
    wrapper_adapter = TypeAdapter(envelope)
    wrapper_schema = {
        "type": "object",
        "properties": {WRAPPED_VALUE_KEY: {k: v for k, v in schema.items() if k != "$defs"}},
        "required": [WRAPPED_VALUE_KEY],
        "additionalProperties": False,
    }
    if "$defs" in schema:
        wrapper_schema["$defs"] = schema["$defs"]
    return TargetSchema(name=name, schema=wrapper_schema, wrapped=True, target=tp, _adapter=wrapper_adapter)


def derive_schema(tp: Any) -> TargetSchema:
    """Return the :class:`TargetSchema` for ``tp`` (cached by type identity).

    Raises:
        SchemaDerivationError: ``tp`` has no structural description pydantic
            can generate (e.g. an arbitrary class without fields metadata).
    """
    try:
        cached = _CACHE.get(tp)
    except TypeError:
        return _derive(tp)
    if cached is not None:
        return cached
    derived = _derive(tp)
    with _CACHE_LOCK:
        return _CACHE.setdefault(tp, derived)


def clear_schema_cache() -> None:
    with _CACHE_LOCK:
        _CACHE.clear()


def simple_schema(properties: Iterable[Tuple[str, str, str]]) -> Dict[str, Any]:
    """Build a flat object schema from ``(name, json_type, description)`` triples.

    Every listed property is required and no other property is allowed.
    """
    props: Dict[str, Any] = {}
    required = []
    for name, type_str, description in properties:
        props[name] = {"type": type_str, "description": description}
        required.append(name)
    return {
        "type": "object",
        "properties": props,
        "required": required,
        "additionalProperties": False,
    }


__all__ = [
    "TargetSchema",
    "derive_schema",
    "schema_name",
    "simple_schema",
    "clear_schema_cache",
]
