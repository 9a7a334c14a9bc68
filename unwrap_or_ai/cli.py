"""Command line interface: ``python -m unwrap_or_ai``.

Subcommands
-----------
- ``schema module:Type``: print the JSON schema derived for a type.
- ``complete PROMPT``: send one raw (unstructured) completion and print it.
- ``backends``: list known backends, their default model and key status.

Error semantics
---------------
Errors are written to stderr as a JSON object and mapped to exit codes:
``2`` for configuration errors (missing key, unknown backend, bad type
reference), ``1`` for backend errors. Diagnostic logging is suppressed
unless ``--verbose`` is given so stdout stays machine readable.
"""

from __future__ import annotations

import argparse
import json
import sys
from importlib import import_module
from typing import Any, Dict, List, Optional

from .backend import UnknownBackendError, create_backend, supported_backends
from .backend.models import supports_structured_output
from .base.constants import DEFAULT_SYSTEM_INSTRUCTION
from .base.errors import BackendError, ConfigurationError, SchemaDerivationError
from .base.logging import suppressed_console
from .config import get_backend_config, get_default_backend
from .config.env import get_env_var_candidates, resolve_backend_key
from .schema import derive_schema

EXIT_OK = 0
EXIT_BACKEND_ERROR = 1
EXIT_CONFIG_ERROR = 2


def _emit_error(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload), file=sys.stderr)


def load_type(ref: str) -> Any:
    """Resolve ``module:Qualified.Name`` to the object it names.

    Raises:
        ValueError: the reference is malformed or names nothing.
    """
    module_name, sep, attr_path = ref.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"expected 'module:Type', got '{ref}'")
    try:
        obj: Any = import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"cannot import module '{module_name}': {exc}") from exc
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise ValueError(f"'{module_name}' has no attribute '{attr_path}'") from None
    return obj


def handle_schema(args: argparse.Namespace) -> int:
    try:
        schema = derive_schema(load_type(args.type))
    except (ValueError, SchemaDerivationError) as exc:
        _emit_error({"error": "invalid_type", "message": str(exc)})
        return EXIT_CONFIG_ERROR
    print(json.dumps(schema.response_format() if args.response_format else schema.schema, indent=2))
    return EXIT_OK


def handle_complete(args: argparse.Namespace) -> int:
    """Send one completion and print the raw text to stdout."""
    try:
        client = create_backend(args.backend)
        text = client.complete(args.system, args.prompt, model=args.model)
    except UnknownBackendError as exc:
        _emit_error({"error": "unknown_backend", "message": str(exc)})
        return EXIT_CONFIG_ERROR
    except ConfigurationError as exc:
        _emit_error({"error": exc.code.value, "variable": exc.variable, "message": str(exc)})
        return EXIT_CONFIG_ERROR
    except BackendError as exc:
        _emit_error({"error": exc.code.value, "status": exc.status, "message": exc.message})
        return EXIT_BACKEND_ERROR
    print(text)
    return EXIT_OK


def describe_backends() -> List[Dict[str, Any]]:
    """Return one JSON-serializable row per backend (no network access)."""
    rows: List[Dict[str, Any]] = []
    default = get_default_backend()
    for name in supported_backends():
        cfg = get_backend_config(name)
        _, var = resolve_backend_key(name)
        rows.append(
            {
                "backend": name,
                "default": name == default,
                "model": cfg.get("model"),
                "structured_output": supports_structured_output(cfg.get("model") or ""),
                "base_url": cfg.get("base_url"),
                "key_set": var is not None,
                "key_vars": list(get_env_var_candidates(name)),
            }
        )
    return rows


def handle_backends(args: argparse.Namespace) -> int:
    rows = describe_backends()
    if args.json:
        print(json.dumps(rows, indent=2))
        return EXIT_OK
    for row in rows:
        marker = "*" if row["default"] else " "
        status = "key set" if row["key_set"] else f"missing {row['key_vars'][0]}"
        print(f"{marker} {row['backend']:<9} {row['model']:<40} {status}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Construct the parser; no side effects."""
    p = argparse.ArgumentParser(prog="unwrap_or_ai", description="AI fallback-value synthesis utilities")
    p.add_argument("--verbose", action="store_true", help="show diagnostic logs on stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_schema = sub.add_parser("schema", help="Print the JSON schema derived for a type")
    p_schema.add_argument("type", help="type reference as module:Type")
    p_schema.add_argument("--response-format", action="store_true", help="print the full response_format object")
    p_schema.set_defaults(func=handle_schema)

    p_complete = sub.add_parser("complete", help="Send one raw completion request")
    p_complete.add_argument("prompt")
    p_complete.add_argument("--system", default=DEFAULT_SYSTEM_INSTRUCTION)
    p_complete.add_argument("--model", default=None)
    p_complete.add_argument("--backend", default=None)
    p_complete.set_defaults(func=handle_complete)

    p_backends = sub.add_parser("backends", help="List known backends and key status")
    p_backends.add_argument("--json", action="store_true")
    p_backends.set_defaults(func=handle_backends)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        return args.func(args)
    with suppressed_console():
        return args.func(args)


__all__ = ["build_parser", "main", "load_type", "describe_backends"]
