"""
Reference Rewriting
===================

Rewrites inline reference tokens between their absolute-path form and their
container-local form.

    file:<path>        -- before packing
    asset:<identifier> -- inside a container

A token ends at the first ';', ']' or newline. The terminator is a lookahead
boundary: it is never consumed or rewritten. A token with no terminator
after it is not a token.

This module performs no I/O. Callers build or supply the NameMap.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

FILE_SCHEME = "file"
ASSET_SCHEME = "asset"

FILE_TOKEN_RE = re.compile(r"file:(.+?)(?=[;\]\n])")
ASSET_TOKEN_RE = re.compile(r"asset:(.+?)(?=[;\]\n])")

_SEPARATORS_RE = re.compile(r"[\\/]")


def base_name(path: str) -> Optional[str]:
    """
    Extract the final component of a path.

    Both '/' and '\\' count as separators so that documents written on
    another platform still yield a usable name.

    Returns:
        The base name, or None for empty, root, '.' and '..' paths
    """
    stripped = path.rstrip("/\\")
    if not stripped:
        return None
    name = _SEPARATORS_RE.split(stripped)[-1]
    if name in ("", ".", ".."):
        return None
    return name


class NameMap:
    """
    Association between container-local identifiers and real file paths.

    Identifiers are unique. Insertion order is preserved and is the order
    in which assets are written to a container.

    Example:
        names = NameMap()
        names.claim("x.png", "/a/x.png")   # -> "x.png"
        names.claim("x.png", "/b/x.png")   # -> "0_x.png"
    """

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._entries: Dict[str, str] = dict(entries or {})

    def claim(self, name: str, path: str) -> str:
        """
        Register a path under a unique identifier derived from name.

        If name is taken, the smallest n >= 0 such that "{n}_{name}" is free
        is used instead.

        Args:
            name: Candidate identifier (usually a base name)
            path: Path to associate with the identifier

        Returns:
            The identifier actually used
        """
        identifier = name
        if identifier in self._entries:
            n = 0
            while f"{n}_{name}" in self._entries:
                n += 1
            identifier = f"{n}_{name}"
        self._entries[identifier] = path
        return identifier

    def add(self, identifier: str, path: str) -> None:
        """Set identifier -> path, replacing any previous association."""
        self._entries[identifier] = path

    def resolve(self, identifier: str) -> Optional[str]:
        """Return the path for identifier, or None."""
        return self._entries.get(identifier)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._entries.items())

    def to_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NameMap):
            return self._entries == other._entries
        if isinstance(other, dict):
            return self._entries == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"NameMap({self._entries!r})"


@dataclass
class RewriteResult:
    """
    Outcome of one rewriting pass.

    Attributes:
        text: Rewritten document text
        name_map: Identifiers seen or used during the pass
        diagnostics: Tokens left unchanged, one message each
    """
    text: str
    name_map: NameMap
    diagnostics: List[str] = field(default_factory=list)


class ReferenceRewriter:
    """
    Scan-and-replace pass over document text.

    The rewriter is the mutable accumulator of one pass: its name map and
    diagnostics fill up while re.sub walks the tokens. Create a new
    rewriter per call.

    Example:
        result = ReferenceRewriter().to_assets("see file:/tmp/a.png;")
        result.text        # "see asset:a.png;"
        result.name_map    # NameMap({"a.png": "/tmp/a.png"})
    """

    def __init__(self, name_map: Optional[NameMap] = None):
        self.name_map = name_map if name_map is not None else NameMap()
        self.diagnostics: List[str] = []

    def to_assets(self, text: str) -> RewriteResult:
        """
        Replace every file:<path> token with asset:<identifier>.

        Args:
            text: Document text

        Returns:
            RewriteResult whose name_map maps identifier -> original path
        """
        rewritten = FILE_TOKEN_RE.sub(self._replace_file_token, text)
        return RewriteResult(rewritten, self.name_map, list(self.diagnostics))

    def to_files(self, text: str) -> RewriteResult:
        """
        Replace every resolvable asset:<identifier> token with file:<path>.

        Unresolvable tokens are left as they are and reported in the
        diagnostics.

        Args:
            text: Document text

        Returns:
            RewriteResult carrying the name map that was used
        """
        rewritten = ASSET_TOKEN_RE.sub(self._replace_asset_token, text)
        return RewriteResult(rewritten, self.name_map, list(self.diagnostics))

    def _replace_file_token(self, match: "re.Match") -> str:
        file_path = match.group(1)
        name = base_name(file_path)
        if name is None:
            message = f"failed to get filename: {file_path}"
            logger.debug(message)
            self.diagnostics.append(message)
            return match.group(0)

        identifier = self.name_map.claim(name, file_path)
        return f"{ASSET_SCHEME}:{identifier}"

    def _replace_asset_token(self, match: "re.Match") -> str:
        identifier = match.group(1)
        path = self.name_map.resolve(identifier)
        if path is None:
            message = f"failed to resolve asset: {identifier}"
            logger.debug(message)
            self.diagnostics.append(message)
            return match.group(0)

        return f"{FILE_SCHEME}:{path}"


def rewrite_for_pack(text: str) -> RewriteResult:
    """Rewrite file: tokens to asset: tokens with a fresh name map."""
    return ReferenceRewriter().to_assets(text)


def rewrite_for_unpack(text: str, name_map: NameMap) -> RewriteResult:
    """Rewrite asset: tokens back to file: tokens using name_map."""
    return ReferenceRewriter(name_map).to_files(text)


def find_asset_identifiers(text: str) -> List[str]:
    """Return the identifiers of all asset: tokens, in document order."""
    return [match.group(1) for match in ASSET_TOKEN_RE.finditer(text)]
