"""Resolve ``$ref`` JSON Reference pointers against the root OpenAPI document.

The router calls into this module for the three places where a reference
changes how a request is built:

* parameter objects (``#/components/parameters/...``),
* request body objects (``#/components/requestBodies/...``),
* request body schemas (``#/components/schemas/...``), which are handed to
  the schema validator and therefore have to be self-contained.

Only **internal** references (those starting with ``#/``) are supported.
Anything else, or a pointer that walks off the document, raises
:class:`~oasclient.exceptions.RefResolutionError` so that a broken spec fails
while the client is being built rather than on its first call.

Circular references inside schemas are detected via a ``seen`` set and left
unresolved at the cycle point to prevent infinite recursion. :func:`bundle_schema`
then moves their targets into a local ``$defs`` section.
"""

from __future__ import annotations

from typing import Any

from oasclient.exceptions import RefResolutionError


def is_ref(obj: Any) -> bool:
    """Return ``True`` if *obj* is a ``{"$ref": ...}`` object."""
    return isinstance(obj, dict) and "$ref" in obj


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root spec.

    Splits the pointer on ``/`` and walks the root document one segment at a
    time. Handles RFC 6901 escaping (``~0`` for ``~``, ``~1`` for ``/``).

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/schemas/Pet"``).
        root: The root spec dictionary to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        RefResolutionError: If the reference is external, or if any segment
            in the pointer path does not exist in the document.
    """
    if not isinstance(ref, str) or not ref.startswith("#/"):
        raise RefResolutionError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise RefResolutionError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise RefResolutionError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise RefResolutionError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )

    return current


def resolve_object(obj: Any, root: dict[str, Any]) -> Any:
    """Follow ``$ref`` chains on *obj* until a non-reference value is reached.

    Used for parameter and request body objects, whose references point at a
    whole object rather than a schema. A chain that loops back on itself
    raises :class:`~oasclient.exceptions.RefResolutionError`.
    """
    seen: set[str] = set()
    while is_ref(obj):
        ref = obj["$ref"]
        if ref in seen:
            raise RefResolutionError(f"Circular $ref chain at '{ref}'")
        seen.add(ref)
        obj = resolve_pointer(ref, root)
    return obj


def resolve_schema(obj: Any, root: dict[str, Any], seen: frozenset[str] = frozenset()) -> Any:
    """Recursively inline every ``$ref`` within a schema.

    Walks dicts and lists depth-first. A **copy** of ``seen`` is carried down
    each branch so that sibling references to the same schema are both
    inlined, while a schema that references itself keeps its ``$ref`` dict at
    the cycle point.

    Args:
        obj: The schema node -- a dict (possibly a ``$ref``), a list, or a
            scalar.
        root: The root spec dictionary used as the lookup target.
        seen: ``$ref`` strings currently on the resolution stack.

    Returns:
        The resolved schema. Dicts and lists are new objects; scalars are
        returned as-is.
    """
    if isinstance(obj, dict):
        if "$ref" in obj:
            ref = obj["$ref"]
            if ref in seen:
                return obj
            return resolve_schema(resolve_pointer(ref, root), root, seen | {ref})
        return {key: resolve_schema(value, root, seen) for key, value in obj.items()}

    if isinstance(obj, list):
        return [resolve_schema(item, root, seen) for item in obj]

    return obj


def bundle_schema(schema: Any, root: dict[str, Any]) -> Any:
    """Make a resolved schema self-contained.

    :func:`resolve_schema` leaves a ``$ref`` at every cycle point, and those
    pointers only make sense against *root*. Each one is rewritten to a local
    ``#/$defs/<name>`` pointer and its target is copied into the top-level
    ``$defs`` of the returned schema, so a validator that never sees *root*
    can still follow it (trees, linked lists).

    Args:
        schema: A schema already passed through :func:`resolve_schema`.
        root: The root spec dictionary the remaining pointers refer to.

    Returns:
        *schema* unchanged when it holds no references, otherwise a new
        schema with the rewritten pointers and the added ``$defs``.
    """
    taken = set(schema.get("$defs") or {}) if isinstance(schema, dict) else set()
    local_refs: dict[str, str] = {}
    definitions: dict[str, Any] = {}

    def rewrite(node: Any) -> Any:
        if isinstance(node, dict):
            if is_ref(node):
                ref = node["$ref"]
                if ref not in local_refs:
                    name = _definition_name(ref, taken)
                    taken.add(name)
                    local_refs[ref] = f"#/$defs/{name}"
                    target = resolve_schema(resolve_pointer(ref, root), root, frozenset({ref}))
                    definitions[name] = rewrite(target)
                return {**node, "$ref": local_refs[ref]}
            return {key: rewrite(value) for key, value in node.items()}
        if isinstance(node, list):
            return [rewrite(item) for item in node]
        return node

    bundled = rewrite(schema)
    if not definitions or not isinstance(bundled, dict):
        return bundled
    return {**bundled, "$defs": {**(bundled.get("$defs") or {}), **definitions}}


def _definition_name(ref: str, taken: set[str]) -> str:
    """Name a ``$defs`` entry after the last segment of *ref*, suffixed until unique."""
    base = ref.rsplit("/", 1)[-1].replace("~1", "_").replace("~0", "_") or "schema"
    name, counter = base, 2
    while name in taken:
        name = f"{base}{counter}"
        counter += 1
    return name
