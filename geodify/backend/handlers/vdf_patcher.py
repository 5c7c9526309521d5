#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
VDF Patcher Module
Structural editor for Steam's text KeyValues files (config.vdf, localconfig.vdf).

Edits are applied to the raw document text: only the touched block changes,
everything else (comments, ordering, whitespace) is written back byte-for-byte.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import vdf

# Initialize logger
logger = logging.getLogger(__name__)

BACKUP_SUFFIX = "geode-backup"

APPS_SECTION = "Apps"
COMPAT_TOOL_SECTION = "CompatToolMapping"
LAUNCH_OPTIONS_KEY = "LaunchOptions"
COMPAT_TOOL_PRIORITY = "250"

Span = Tuple[int, int]
PathLike = Union[str, Path]


class VDFPatchError(Exception):
    """Base class for all patcher failures."""


class StructuralPreconditionError(VDFPatchError):
    """A required section is missing from the document."""


class MalformedDocumentError(VDFPatchError):
    """Unbalanced braces or an unterminated string."""


class DocumentIOError(VDFPatchError):
    """The document could not be read, backed up or written."""


@dataclass
class Entry:
    """A direct child of a block body: either a key/value pair or a nested block."""
    name: str
    name_start: int
    name_end: int
    value_span: Optional[Span] = None
    body_span: Optional[Span] = None

    @property
    def is_block(self) -> bool:
        return self.body_span is not None


@dataclass
class PatchResult:
    """Outcome of a patch applied to one file."""
    path: Path
    backup_path: Optional[Path]
    changed: bool
    created_block: bool


# --- Scanner ---

def _skip_string(content: str, quote_pos: int) -> int:
    """Return the offset just past the string opened at quote_pos, or -1 if unterminated."""
    i = quote_pos + 1
    length = len(content)
    while i < length:
        c = content[i]
        if c == '\\':
            i += 2
            continue
        if c == '"':
            return i + 1
        i += 1
    return -1


def _skip_comment(content: str, pos: int) -> int:
    end = content.find('\n', pos)
    return len(content) if end == -1 else end


def find_block_end(content: str, open_pos: int) -> int:
    """
    Find the '}' matching the '{' at open_pos.

    Quoted strings (with backslash escapes) and // comments are not structural.

    Returns:
        int: offset of the closing brace, or -1 if the document ends first
    """
    if open_pos >= len(content) or content[open_pos] != '{':
        return -1
    depth = 0
    i = open_pos
    length = len(content)
    while i < length:
        c = content[i]
        if c == '"':
            i = _skip_string(content, i)
            if i == -1:
                return -1
            continue
        if c == '/' and content.startswith('//', i):
            i = _skip_comment(content, i)
            continue
        if c == '{':
            depth += 1
        elif c == '}':
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def find_block_open(content: str, start: int, stop: Optional[int] = None) -> int:
    """Find the next structural '{' at or after start, skipping quoted text and comments."""
    end = len(content) if stop is None else stop
    i = start
    while i < end:
        c = content[i]
        if c == '"':
            i = _skip_string(content, i)
            if i == -1:
                return -1
            continue
        if c == '/' and content.startswith('//', i):
            i = _skip_comment(content, i)
            continue
        if c == '{':
            return i
        i += 1
    return -1


def _unescape(text: str) -> str:
    if '\\' not in text:
        return text
    out = []
    i = 0
    while i < len(text):
        if text[i] == '\\' and i + 1 < len(text):
            out.append(text[i + 1])
            i += 2
            continue
        out.append(text[i])
        i += 1
    return ''.join(out)


def _escape(text: str) -> str:
    return text.replace('\\', '\\\\').replace('"', '\\"')


def parse_entries(content: str, span: Span) -> List[Entry]:
    """
    List the direct entries of a block body in document order.

    Nested blocks are skipped over as a whole; their contents are not returned.

    Raises:
        MalformedDocumentError: on an unterminated string, unmatched '{' or stray '}'
    """
    start, end = span
    entries = []
    pending = None
    i = start
    while i < end:
        c = content[i]
        if c == '"':
            close = _skip_string(content, i)
            if close == -1 or close > end:
                raise MalformedDocumentError(f"Unterminated string at offset {i}")
            if pending is None:
                pending = (i, close)
            else:
                name = _unescape(content[pending[0] + 1:pending[1] - 1])
                entries.append(Entry(name, pending[0], pending[1], value_span=(i, close)))
                pending = None
            i = close
        elif c == '{':
            close = find_block_end(content, i)
            if close == -1 or close >= end:
                raise MalformedDocumentError(f"Unmatched '{{' at offset {i}")
            if pending is not None:
                name = _unescape(content[pending[0] + 1:pending[1] - 1])
                entries.append(Entry(name, pending[0], pending[1], body_span=(i + 1, close)))
                pending = None
            i = close + 1
        elif c == '}':
            raise MalformedDocumentError(f"Unexpected '}}' at offset {i}")
        elif c == '/' and content.startswith('//', i):
            i = _skip_comment(content, i)
        else:
            i += 1
    return entries


# --- Block locate / create ---

def find_child_block(content: str, parent_span: Span, name: str) -> Optional[Span]:
    """Return the body span of the direct child block called name (case-insensitive)."""
    wanted = name.lower()
    for entry in parse_entries(content, parent_span):
        if entry.is_block and entry.name.lower() == wanted:
            return entry.body_span
    return None


def find_section(content: str, name: str) -> Optional[Span]:
    """Return the body span of the first block called name, at any depth, in document order."""
    wanted = name.lower()

    def search(span: Span) -> Optional[Span]:
        for entry in parse_entries(content, span):
            if not entry.is_block:
                continue
            if entry.name.lower() == wanted:
                return entry.body_span
            found = search(entry.body_span)
            if found is not None:
                return found
        return None

    return search((0, len(content)))


def _newline(content: str) -> str:
    return '\r\n' if '\r\n' in content else '\n'


def _line_indent(content: str, pos: int) -> str:
    """Leading whitespace of the line containing pos."""
    line_start = content.rfind('\n', 0, pos) + 1
    j = line_start
    while j < pos and content[j] in ' \t':
        j += 1
    return content[line_start:j]


def _insert_before_close(content: str, span: Span, lines: str) -> Tuple[str, int, int]:
    """
    Insert complete lines at the end of a block body.

    When the closing brace sits on its own line the text goes in front of that
    line, so the brace keeps its indentation.

    Returns:
        (content, pos, added): the new document, where the text starts and its length
    """
    body_start, body_end = span
    newline = content.rfind('\n', body_start, body_end)
    if newline != -1 and not content[newline + 1:body_end].strip():
        pos = newline + 1
        text = lines
    else:
        pos = body_end
        text = _newline(content) + lines
    return content[:pos] + text + content[pos:], pos, len(text)


def find_or_create_child_block(content: str, parent_span: Span, name: str) -> Tuple[str, Span, bool]:
    """
    Locate the child block called name, creating an empty one if it is missing.

    Returns:
        (content, span, created): the document to use from now on, the child's
        body span within it, and whether the block was synthesized
    """
    span = find_child_block(content, parent_span, name)
    if span is not None:
        return content, span, False

    eol = _newline(content)
    indent = _line_indent(content, parent_span[1]) + '\t'
    block = f'{indent}"{_escape(name)}"{eol}{indent}{{{eol}{indent}}}{eol}'
    content, pos, added = _insert_before_close(content, parent_span, block)

    open_pos = find_block_open(content, pos, pos + added)
    close = find_block_end(content, open_pos) if open_pos != -1 else -1
    if close == -1:
        raise MalformedDocumentError(f"Inserted block '{name}' could not be located again")
    span = (open_pos + 1, close)
    logger.debug(f"Created block '{name}' at offset {span[0]}")
    return content, span, True


# --- Key set-or-insert ---

def set_key_value(content: str, span: Span, key: str, value: str) -> Tuple[str, Span]:
    """
    Set key to value inside the block body at span.

    An existing key (case-insensitive) keeps its spelling and layout; only the
    quoted value is replaced. A missing key is appended as a new line.

    Returns:
        (content, span): the new document and the block's updated body span
    """
    wanted = key.lower()
    quoted = f'"{_escape(value)}"'
    entries = parse_entries(content, span)

    for entry in entries:
        if entry.is_block or entry.name.lower() != wanted:
            continue
        value_start, value_end = entry.value_span
        content = content[:value_start] + quoted + content[value_end:]
        delta = len(quoted) - (value_end - value_start)
        return content, (span[0], span[1] + delta)

    if entries:
        indent = _line_indent(content, entries[-1].name_start)
    else:
        indent = _line_indent(content, span[1]) + '\t'
    line = f'{indent}"{_escape(key)}"\t\t{quoted}{_newline(content)}'
    content, _, added = _insert_before_close(content, span, line)
    return content, (span[0], span[1] + added)


def patch_document(content: str, section: str, block_name: str,
                   values: Iterable[Tuple[str, str]]) -> Tuple[str, bool]:
    """
    Apply key/value pairs to section/block_name, creating the block if needed.

    Raises:
        StructuralPreconditionError: if section does not exist
        MalformedDocumentError: if the document structure is broken
    """
    section_span = find_section(content, section)
    if section_span is None:
        raise StructuralPreconditionError(f"{section} section not found.")

    content, span, created = find_or_create_child_block(content, section_span, block_name)
    for key, value in values:
        content, span = set_key_value(content, span, key, value)
    return content, created


# --- File transaction ---

def read_document(path: PathLike) -> str:
    try:
        with open(path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
            return f.read()
    except OSError as e:
        raise DocumentIOError(f"Cannot read {path}: {e}") from e


def _write_document(path: Path, content: str) -> None:
    with open(path, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
        f.write(content)


def backup_path_for(path: PathLike, suffix: str = BACKUP_SUFFIX) -> Path:
    path = Path(path)
    return path.with_name(f"{path.name}.{suffix}")


def write_with_backup(path: PathLike, content: str, suffix: str = BACKUP_SUFFIX) -> Path:
    """
    Copy path to its backup sibling, then overwrite path with content.

    The write is only attempted once the backup copy exists.

    Returns:
        Path: the backup file
    """
    path = Path(path)
    backup_path = backup_path_for(path, suffix)
    try:
        shutil.copy2(path, backup_path)
    except OSError as e:
        raise DocumentIOError(f"Cannot back up {path} to {backup_path}: {e}") from e
    logger.debug(f"Backed up {path} to {backup_path}")

    try:
        _write_document(path, content)
    except OSError as e:
        raise DocumentIOError(f"Cannot write {path}: {e}") from e
    logger.info(f"Wrote {path}")
    return backup_path


def patch_file(path: PathLike, section: str, block_name: str,
               values: Iterable[Tuple[str, str]], backup_suffix: str = BACKUP_SUFFIX) -> PatchResult:
    path = Path(path)
    original = read_document(path)
    content, created = patch_document(original, section, block_name, values)

    if content == original:
        logger.info(f"{path} already up to date, nothing written")
        return PatchResult(path=path, backup_path=None, changed=False, created_block=False)

    backup = write_with_backup(path, content, backup_suffix)
    return PatchResult(path=path, backup_path=backup, changed=True, created_block=created)


def set_launch_options(path: PathLike, app_id: str, launch_options: str,
                       backup_suffix: str = BACKUP_SUFFIX) -> PatchResult:
    """Set Apps/<app_id>/LaunchOptions in a localconfig.vdf."""
    logger.debug(f"Setting launch options for {app_id} in {path}")
    return patch_file(path, APPS_SECTION, str(app_id),
                      [(LAUNCH_OPTIONS_KEY, launch_options)], backup_suffix)


def set_compat_tool(path: PathLike, app_id: str, tool_name: str,
                    backup_suffix: str = BACKUP_SUFFIX) -> PatchResult:
    """Map app_id to a compatibility tool in config.vdf's CompatToolMapping."""
    logger.debug(f"Setting compat tool {tool_name} for {app_id} in {path}")
    values = [
        ("name", tool_name),
        ("config", ""),
        ("Priority", COMPAT_TOOL_PRIORITY),
    ]
    return patch_file(path, COMPAT_TOOL_SECTION, str(app_id), values, backup_suffix)


# --- Descriptor readers ---

def _load_vdf(path: PathLike) -> Optional[dict]:
    try:
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            return vdf.load(f)
    except (OSError, SyntaxError) as e:
        logger.debug(f"Could not parse {path}: {e}")
        return None


def _find_block(node: dict, name: str) -> Optional[dict]:
    wanted = name.lower()
    for key, value in node.items():
        if not isinstance(value, dict):
            continue
        if key.lower() == wanted:
            return value
        found = _find_block(value, name)
        if found is not None:
            return found
    return None


def _find_value(node: dict, key: str) -> Optional[str]:
    wanted = key.lower()
    for name, value in node.items():
        if isinstance(value, dict):
            found = _find_value(value, key)
            if found is not None:
                return found
        elif name.lower() == wanted:
            return value
    return None


def read_internal_name(path: PathLike) -> Optional[str]:
    """
    Internal name of a compatibilitytool.vdf descriptor.

    This is the first child of the compat_tools block, or a flat internal_name key.
    """
    data = _load_vdf(path)
    if not data:
        return None
    tools = _find_block(data, "compat_tools")
    if tools:
        for name, value in tools.items():
            if isinstance(value, dict) and name:
                return name
    return _find_value(data, "internal_name") or None


def read_display_name(path: PathLike) -> Optional[str]:
    """display_name of a compatibilitytool.vdf descriptor, if present."""
    data = _load_vdf(path)
    if not data:
        return None
    return _find_value(data, "display_name") or None
