"""Core parsing and serialization modules.

WHY: The core package is the stable heart of bbmarkup: the token tree
dataclasses and the parser that builds them. Formatters, adapters, the
CLI, and the HTTP API all consume its output and must not need to know
how brackets were matched.

HOW: ir.py defines the token tree, bracketizer.py splits text into
bracket groups, opening.py decides which groups open tags, builder.py
matches tags on a stack, serialize.py turns trees back into markup.

RULES:
- Token dataclasses are the contract; change with care
- No I/O, no configuration lookups, no global mutable state in core
- Parsing never raises for malformed markup
"""
