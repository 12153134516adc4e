# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Recipe field extraction.

A PKGBUILD is a bash script, but pacbridge never runs it to read metadata.
The handful of fields the pipeline needs are read textually:

    validpgpkeys            -> signing_key_ids (order kept)
    makedepends, checkdepends -> build_dependencies
    depends                 -> runtime_dependencies
    pkgname, pkgver, pkgrel -> informational

Arrays may span lines, quote their items, carry comments and be extended
with ``+=``. Items built from shell expansions are skipped because their
value only exists when bash evaluates the file. When a ``.SRCINFO`` sits
next to the PKGBUILD it is used instead; it is makepkg's own flattened view
of the same fields.
"""

import logging
import re
import shlex
from pathlib import Path
from typing import Dict, List, Optional

from pacbridge.core.exceptions import RecipeParseError
from pacbridge.core.models import RecipeMetadata

logger = logging.getLogger("pacbridge.recipe")

SRCINFO = ".SRCINFO"

ARRAY_FIELDS = ("validpgpkeys", "depends", "makedepends", "checkdepends")
SCALAR_FIELDS = ("pkgname", "pkgver", "pkgrel")

_ARRAY_START = re.compile(r"^[ \t]*([A-Za-z_][A-Za-z0-9_]*)(\+?=)\(", re.MULTILINE)
_SCALAR = re.compile(r"^[ \t]*([A-Za-z_][A-Za-z0-9_]*)=(?!\()(.*)$", re.MULTILINE)
_EXPANSION_CHARS = ("$", "`", "{", "}")
# stands in for a command substitution so the item holding it is skipped
_SUBSTITUTION = "$__"


def _is_literal(item: str) -> bool:
    return bool(item) and not any(c in item for c in _EXPANSION_CHARS)


def _substitution_end(text: str, start: int) -> int:
    """Index just past the ``$(...)`` or backtick substitution at start"""
    if text[start] == "`":
        i = start + 1
        while i < len(text):
            if text[i] == "\\":
                i += 2
                continue
            if text[i] == "`":
                return i + 1
            i += 1
        raise ValueError("unterminated command substitution")

    depth = 0
    quote: Optional[str] = None
    i = start + 1
    while i < len(text):
        c = text[i]
        if quote:
            if c == "\\" and quote == '"':
                i += 2
                continue
            if c == quote:
                quote = None
        elif c in ("'", '"'):
            quote = c
        elif c == "\\":
            i += 2
            continue
        elif c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    raise ValueError("unterminated command substitution")


def _array_body(text: str, start: int) -> str:
    """
    Return text from start up to the ``)`` closing the array.

    Comments are dropped and command substitutions are replaced by a
    placeholder, so a ``)`` inside ``$(...)`` never ends the array.
    """
    out: List[str] = []
    quote: Optional[str] = None
    i = start
    while i < len(text):
        c = text[i]
        if quote != "'" and (c == "`" or text.startswith("$(", i)):
            i = _substitution_end(text, i)
            out.append(_SUBSTITUTION)
            continue
        if quote:
            if c == "\\" and quote == '"':
                out.append(text[i : i + 2])
                i += 2
                continue
            if c == quote:
                quote = None
        elif c in ("'", '"'):
            quote = c
        elif c == "\\":
            out.append(text[i : i + 2])
            i += 2
            continue
        elif c == "#" and (i == start or text[i - 1].isspace()):
            newline = text.find("\n", i)
            i = len(text) if newline == -1 else newline
            continue
        elif c == ")":
            return "".join(out)
        out.append(c)
        i += 1
    raise ValueError("unterminated array")


def _split_items(body: str) -> List[str]:
    try:
        return shlex.split(body, comments=True)
    except ValueError:
        # unbalanced quoting; fall back to whitespace words
        return body.split()


def parse_pkgbuild_text(text: str) -> Dict[str, List[str]]:
    """Collect the array and scalar fields pacbridge cares about"""
    fields: Dict[str, List[str]] = {}

    for match in _ARRAY_START.finditer(text):
        name, op = match.group(1), match.group(2)
        if name not in ARRAY_FIELDS and name not in SCALAR_FIELDS:
            continue
        try:
            body = _array_body(text, match.end())
        except ValueError:
            logger.warning(f"Unterminated {name}=( array, ignoring it")
            continue
        items = [item for item in _split_items(body) if _is_literal(item)]
        if op == "+=":
            fields.setdefault(name, []).extend(items)
        else:
            fields[name] = items

    for match in _SCALAR.finditer(text):
        name, raw = match.group(1), match.group(2)
        if name not in SCALAR_FIELDS or name in fields:
            continue
        values = _split_items(raw)
        if values and _is_literal(values[0]):
            fields[name] = [values[0]]

    return fields


def parse_srcinfo_text(text: str) -> Dict[str, List[str]]:
    """Read ``key = value`` lines; the first pkgname wins"""
    fields: Dict[str, List[str]] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if key in ARRAY_FIELDS:
            if _is_literal(value):
                fields.setdefault(key, []).append(value)
        elif key in SCALAR_FIELDS and key not in fields:
            fields[key] = [value]
    return fields


def _unique(items: List[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def _metadata_from_fields(fields: Dict[str, List[str]]) -> RecipeMetadata:
    def scalar(name: str) -> Optional[str]:
        values = fields.get(name)
        return values[0] if values else None

    return RecipeMetadata(
        signing_key_ids=tuple(_unique(fields.get("validpgpkeys", []))),
        build_dependencies=frozenset(
            fields.get("makedepends", []) + fields.get("checkdepends", [])
        ),
        runtime_dependencies=frozenset(fields.get("depends", [])),
        pkgname=scalar("pkgname"),
        pkgver=scalar("pkgver"),
        pkgrel=scalar("pkgrel"),
    )


def parse_recipe(recipe_path: Path) -> RecipeMetadata:
    """
    Extract RecipeMetadata from a PKGBUILD (or its sibling .SRCINFO).

    Raises:
        RecipeParseError: The PKGBUILD does not exist or cannot be read
    """
    recipe_path = Path(recipe_path)
    srcinfo = recipe_path.parent / SRCINFO

    try:
        if srcinfo.is_file():
            logger.debug(f"Reading metadata from {srcinfo}")
            return _metadata_from_fields(
                parse_srcinfo_text(srcinfo.read_text(encoding="utf-8", errors="replace"))
            )
        text = recipe_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise RecipeParseError(
            f"Cannot read recipe {recipe_path}", path=str(recipe_path), cause=e
        )

    logger.debug(f"Reading metadata from {recipe_path}")
    return _metadata_from_fields(parse_pkgbuild_text(text))
