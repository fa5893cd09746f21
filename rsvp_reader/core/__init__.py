"""Core text-analysis pipeline and data structures.

WHY: The core package is the rule-dense heart of the reader — format
detection, segmentation, speaker directory, tokenization, frame and pivot
resolution. Everything else consumes its DocumentSnapshot.

HOW: ir.py defines the data structures, patterns.py the shared speaker
marker vocabulary, and one module per pipeline stage builds on those.
pipeline.py wires the stages into build_document().

RULES:
- Pure functions over strings; no I/O, no clocks
- IR dataclasses are frozen — snapshots are replaced, never mutated
"""
