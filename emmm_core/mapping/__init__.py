"""
Reference Mapping Module
========================

Rewrites file:/asset: reference tokens and tracks the identifier -> path
associations built while doing so.
"""

from emmm_core.mapping.reference_rewriter import (
    NameMap,
    ReferenceRewriter,
    RewriteResult,
    base_name,
    find_asset_identifiers,
    rewrite_for_pack,
    rewrite_for_unpack,
)

__all__ = [
    "NameMap",
    "ReferenceRewriter",
    "RewriteResult",
    "base_name",
    "find_asset_identifiers",
    "rewrite_for_pack",
    "rewrite_for_unpack",
]
