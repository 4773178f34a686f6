"""Adapters between page bodies and collaborator tooling.

WHY: Archivers, asset downloaders, and re-hosting scripts all do the same
thing with the parser: find the URLs inside a few tag types and swap them
for local references. Keeping that glue here stops each collaborator from
re-implementing it against the raw token tree.

RULES:
- Adapters only use the public core API (parse_all, flatten, reconstruct)
- Adapters never fetch, download, or write files
"""
