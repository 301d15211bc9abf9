"""Workspace tool executor — file operations that realize Document Updates.

Every result is ``{"success": True, "data": ...}`` or
``{"success": False, "error": "..."}``; handlers never raise for bad input.
"""

import logging
import re
from pathlib import Path

from .models import DocumentUpdate

logger = logging.getLogger("docu.tools")


TOOL_DEFINITIONS = [
    {
        "name": "readFile",
        "description": "Read a text file from the workspace.",
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path relative to the workspace root"},
            },
            "required": ["path"],
        },
    },
    {
        "name": "writeFile",
        "description": "Create or overwrite a text file in the workspace. Parent directories are created as needed.",
        "input_schema": {
            "type": "object",
            "properties": {
                "path": {"type": "string", "description": "Path relative to the workspace root"},
                "content": {"type": "string"},
            },
            "required": ["path", "content"],
        },
    },
    {
        "name": "insertSection",
        "description": "Update one section of a markdown document, found by its header. The section is added at the end when missing.",
        "input_schema": {
            "type": "object",
            "properties": {
                "targetPath": {"type": "string", "description": "Path relative to the workspace root"},
                "section": {"type": "string", "description": "Header text, with or without leading #"},
                "content": {"type": "string"},
                "mode": {"type": "string", "enum": ["append", "replace", "prepend"], "default": "append"},
            },
            "required": ["targetPath", "section", "content"],
        },
    },
    {
        "name": "listFiles",
        "description": "List files under a workspace directory.",
        "input_schema": {
            "type": "object",
            "properties": {
                "dir": {"type": "string", "description": "Directory relative to the workspace root", "default": "."},
                "glob": {"type": "string", "description": "Glob pattern, e.g. '*.md'", "default": "*"},
            },
        },
    },
]

_HEADER_RE = re.compile(r"^(#{1,6})\s+(.+)$")


def _ok(data) -> dict:
    return {"success": True, "data": data}


def _error(message: str) -> dict:
    return {"success": False, "error": message}


class WorkspaceTools:
    """Tool executor rooted at one workspace directory."""

    def __init__(self, root: Path):
        self.root = Path(root).resolve()

    def execute(self, tool_name: str, params: dict) -> dict:
        """Route a tool call to the appropriate handler."""
        logger.debug("Tool call: %s | input: %.200s", tool_name, str(params))
        handlers = {
            "readFile": self._handle_read_file,
            "writeFile": self._handle_write_file,
            "insertSection": self._handle_insert_section,
            "listFiles": self._handle_list_files,
        }
        handler = handlers.get(tool_name)
        if handler is None:
            logger.warning("Unknown tool name: %s", tool_name)
            return _error(f"Unknown tool: {tool_name}")
        try:
            return handler(params or {})
        except OSError as e:
            logger.warning("Tool %s failed: %s", tool_name, e)
            return _error(str(e))

    def _resolve(self, relative: str) -> Path | None:
        """Absolute path inside the workspace, or None when it escapes the root."""
        if not relative:
            return None
        candidate = (self.root / relative).resolve()
        if candidate != self.root and not candidate.is_relative_to(self.root):
            return None
        return candidate

    # -------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------

    def _handle_read_file(self, params: dict) -> dict:
        rel = params.get("path", "")
        path = self._resolve(rel)
        if path is None:
            return _error(f"Path outside workspace: {rel}")
        if not path.is_file():
            return _error(f"File not found: {rel}")
        return _ok({"path": rel, "content": path.read_text(encoding="utf-8")})

    def _handle_write_file(self, params: dict) -> dict:
        rel = params.get("path", "")
        path = self._resolve(rel)
        if path is None:
            return _error(f"Path outside workspace: {rel}")
        content = params.get("content", "")
        existed = path.exists()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info("Wrote %s (%d chars)", rel, len(content))
        return _ok({"path": rel, "created": not existed})

    def _handle_insert_section(self, params: dict) -> dict:
        rel = params.get("targetPath") or params.get("path", "")
        path = self._resolve(rel)
        if path is None:
            return _error(f"Path outside workspace: {rel}")
        if not path.is_file():
            return _error(f"File not found: {rel}. Use /new to create it first.")

        header = params.get("section") or params.get("header", "")
        if not header:
            return _error("Missing section header")
        mode = params.get("mode", "append")
        if mode not in ("append", "replace", "prepend"):
            return _error(f"Unknown mode: {mode}")

        existing = path.read_text(encoding="utf-8")
        updated, created = insert_section(existing, header, params.get("content", ""), mode)
        path.write_text(updated, encoding="utf-8")
        logger.info("Updated section '%s' in %s (%s)", header, rel, "create" if created else mode)
        return _ok({"path": rel, "changed": updated != existing, "mode": "create" if created else mode})

    def _handle_list_files(self, params: dict) -> dict:
        rel = params.get("dir") or "."
        path = self._resolve(rel)
        if path is None:
            return _error(f"Path outside workspace: {rel}")
        if not path.is_dir():
            return _error(f"Directory not found: {rel}")
        files = sorted(
            p.relative_to(self.root).as_posix()
            for p in path.glob(params.get("glob") or "*")
            if p.is_file()
        )
        return _ok(files)


# ---------------------------------------------------------------------------
# Markdown section editing
# ---------------------------------------------------------------------------

def _find_section(lines: list[str], header: str) -> tuple[int, int] | None:
    """(header_line, end_line_exclusive) of the best-matching section."""
    target = header.lstrip("#").strip().lower()
    sections = []
    for i, line in enumerate(lines):
        match = _HEADER_RE.match(line.strip())
        if match:
            sections.append((i, len(match.group(1)), match.group(2).strip().lower()))

    def end_of(index: int, level: int) -> int:
        for j in range(index + 1, len(lines)):
            match = _HEADER_RE.match(lines[j].strip())
            if match and len(match.group(1)) <= level:
                return j
        return len(lines)

    # Exact title first, then containment either way
    for start, level, title in sections:
        if title == target:
            return start, end_of(start, level)
    for start, level, title in sections:
        if target in title or title in target:
            return start, end_of(start, level)
    return None


def insert_section(document: str, header: str, content: str, mode: str = "append") -> tuple[str, bool]:
    """Apply ``content`` to the section under ``header``.

    Returns (new_document, created) where created is True when the section
    did not exist and was added at the end.
    """
    lines = document.split("\n")
    found = _find_section(lines, header)
    if found is None:
        header_line = header if header.startswith("#") else f"## {header}"
        return f"{document.rstrip()}\n\n{header_line}\n\n{content}", True

    start, end = found
    body = content.split("\n")
    if mode == "replace":
        lines[start + 1:end] = body
    elif mode == "prepend":
        lines[start + 1:start + 1] = body
    else:
        # Append before trailing blank lines so the next header keeps its spacing
        insert_at = end
        while insert_at > start + 1 and not lines[insert_at - 1].strip():
            insert_at -= 1
        lines[insert_at:insert_at] = body
    return "\n".join(lines), False


def apply_document_updates(executor, updates: list[DocumentUpdate]) -> list[dict]:
    """Realize Document Updates through a tool executor, in order.

    Section "content" addresses the whole document; any other section is
    handed to insertSection verbatim.
    """
    results = []
    for update in updates:
        if update.section == "content":
            content = update.content
            if update.mode != "replace":
                current = executor.execute("readFile", {"path": update.target_path})
                existing = current["data"]["content"] if current.get("success") else ""
                content = existing + content if update.mode == "append" else content + existing
            result = executor.execute("writeFile", {"path": update.target_path, "content": content})
        else:
            result = executor.execute("insertSection", update.to_dict())
        if not result.get("success"):
            logger.warning("Document update on %s#%s failed: %s",
                           update.target_path, update.section, result.get("error"))
        results.append(result)
    return results
