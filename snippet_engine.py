"""
snippet_engine.py

A small snippet registry: filetype-scoped templates built from static text
segments and numbered insertion points, plus a loader for snippet packages
in the VS Code format (``package.json`` with ``contributes.snippets``).

Packages are only indexed by ``lazy_load``; a language's snippet files are
read the first time that language is queried.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

log = logging.getLogger("scc.snippets")

# Bundled VS Code-format snippet packages
BUNDLED_SNIPPETS_DIR = Path(__file__).parent / "snippets"

_TABSTOP_RE = re.compile(r"\\\$|\$(\d+)|\$\{(\d+)(?::([^}]*))?\}")

# File extension -> snippet filetype
FILETYPES = {
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".h": "cpp",
    ".c": "c",
}


def filetype_for_path(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    return FILETYPES.get(Path(path).suffix.lower())


def trigger_before(line_text: str) -> str:
    """Return the identifier-like word that ends *line_text* (may be empty)."""
    word = ""
    for ch in reversed(line_text):
        if ch.isalnum() or ch == "_":
            word = ch + word
        else:
            break
    return word


@dataclass(frozen=True)
class TextNode:
    """Static text; consecutive entries are joined with newlines."""

    lines: Tuple[str, ...]

    def __init__(self, lines: Union[str, Sequence[str]]):
        if isinstance(lines, str):
            lines = (lines,)
        object.__setattr__(self, "lines", tuple(lines))

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass(frozen=True)
class InsertNode:
    """A user-editable insertion point.  Index 0 marks the final exit."""

    index: int
    placeholder: str = ""


Node = Union[TextNode, InsertNode]


@dataclass
class Snippet:
    trigger: str
    nodes: List[Node]
    description: str = ""

    def expand(self) -> Tuple[str, int]:
        """Render the snippet.

        Returns ``(text, cursor_offset)`` where the cursor sits at the start
        of the lowest positive insertion point, or at ``$0`` / the end of the
        text when there is none.
        """
        parts: List[str] = []
        stops: Dict[int, int] = {}
        placeholders: Dict[int, str] = {}
        pos = 0
        for node in self.nodes:
            if isinstance(node, InsertNode):
                stops.setdefault(node.index, pos)
                # repeated indices mirror the first placeholder
                chunk = placeholders.setdefault(node.index, node.placeholder)
            else:
                chunk = node.text
            parts.append(chunk)
            pos += len(chunk)
        text = "".join(parts)
        positive = sorted(i for i in stops if i > 0)
        if positive:
            return text, stops[positive[0]]
        return text, stops.get(0, len(text))


def parse_body(body: Union[str, Sequence[str]]) -> List[Node]:
    """Turn a VS Code snippet body into nodes.

    Supports ``$N``, ``${N}``, ``${N:placeholder}`` and ``\\$`` escapes;
    anything else (variables, choices) is kept as literal text.
    """
    if not isinstance(body, str):
        body = "\n".join(body)
    nodes: List[Node] = []
    buf: List[str] = []
    last = 0
    for m in _TABSTOP_RE.finditer(body):
        buf.append(body[last:m.start()])
        last = m.end()
        if m.group(0) == "\\$":
            buf.append("$")
            continue
        if buf and "".join(buf):
            nodes.append(TextNode("".join(buf).split("\n")))
        buf = []
        index = int(m.group(1) or m.group(2))
        nodes.append(InsertNode(index, m.group(3) or ""))
    buf.append(body[last:])
    if "".join(buf):
        nodes.append(TextNode("".join(buf).split("\n")))
    return nodes


class SnippetRegistry:
    """Explicit filetype -> trigger -> Snippet registry."""

    def __init__(self):
        self._snippets: Dict[str, Dict[str, Snippet]] = {}
        # language -> snippet files not read yet
        self._pending: Dict[str, List[Path]] = {}

    # ── Registration ─────────────────────────────────────────────────
    def add_snippets(self, filetype: str, snippets: Iterable[Snippet]) -> None:
        table = self._snippets.setdefault(filetype, {})
        for snip in snippets:
            if snip.trigger in table:
                log.debug("Replacing %s snippet %r", filetype, snip.trigger)
            table[snip.trigger] = snip

    def get(self, filetype: str, trigger: str) -> Optional[Snippet]:
        return self.snippets_for(filetype).get(trigger)

    def snippets_for(self, filetype: str) -> Dict[str, Snippet]:
        self._load_pending(filetype)
        return dict(self._snippets.get(filetype, {}))

    def filetypes(self) -> List[str]:
        return sorted(set(self._snippets) | set(self._pending))

    # ── VS Code packages ─────────────────────────────────────────────
    def lazy_load(self, paths: Optional[Iterable[Union[str, Path]]] = None) -> int:
        """Index snippet packages under *paths* without reading them.

        Each path may itself hold a ``package.json`` or contain package
        directories one level down.  Returns the number of packages found.
        """
        roots = [Path(p) for p in paths] if paths is not None else [BUNDLED_SNIPPETS_DIR]
        found = 0
        for root in roots:
            if not root.is_dir():
                log.warning("Snippet path %s is not a directory, skipping", root)
                continue
            candidates = [root / "package.json"] + sorted(root.glob("*/package.json"))
            for manifest in candidates:
                if manifest.is_file() and self._index_package(manifest):
                    found += 1
        log.info("Indexed %d snippet package(s)", found)
        return found

    def _index_package(self, manifest: Path) -> bool:
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
            entries = data["contributes"]["snippets"]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            log.warning("Skipping snippet package %s: %s", manifest, exc)
            return False
        for entry in entries:
            if not isinstance(entry, dict) or "path" not in entry:
                log.warning("Malformed snippet entry in %s: %r", manifest, entry)
                continue
            languages = entry.get("language", [])
            if isinstance(languages, str):
                languages = [languages]
            target = (manifest.parent / entry["path"]).resolve()
            for lang in languages:
                self._pending.setdefault(lang, []).append(target)
        log.debug("Indexed snippet package %s", manifest.parent.name)
        return True

    def _load_pending(self, filetype: str) -> None:
        files = self._pending.pop(filetype, None)
        if not files:
            return
        table = self._snippets.setdefault(filetype, {})
        for path in files:
            for snip in self._read_snippet_file(path):
                # explicitly added snippets win over packaged ones
                table.setdefault(snip.trigger, snip)
        log.debug("Loaded %d %s snippet(s)", len(table), filetype)

    @staticmethod
    def _read_snippet_file(path: Path) -> List[Snippet]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Skipping snippet file %s: %s", path, exc)
            return []
        if not isinstance(data, dict):
            log.warning("Skipping snippet file %s: top level is not an object", path)
            return []
        result: List[Snippet] = []
        for name, item in data.items():
            if not isinstance(item, dict) or "prefix" not in item or "body" not in item:
                log.warning("Skipping malformed snippet %r in %s", name, path.name)
                continue
            prefixes = item["prefix"]
            if isinstance(prefixes, str):
                prefixes = [prefixes]
            nodes = parse_body(item["body"])
            for prefix in prefixes:
                result.append(Snippet(prefix, nodes, item.get("description", name)))
        return result
