"""pikesre Rules - Reactive document patterns.

This module provides the document side of pikesre:
- Glob matching over slash-delimited keys
- Template substitution for reaction keys and payloads
- PatternEngine: rule registry with cascading evaluation
- Preset rule definitions

Rules watch document keys, filter payloads with guard/veto regexes and
emit derived documents built from templates.
"""

from .engine import (
    CompiledPattern,
    Document,
    DocumentMetadata,
    PatternCompileError,
    PatternDef,
    PatternEngine,
    Scroll,
    apply_pattern,
    compile_pattern,
    load_pattern_defs,
    pattern,
    serialize_payload,
)
from .glob import (
    GlobPattern,
    GlobSegment,
    SegmentType,
    compile_glob,
    extract_glob_captures,
    glob_match,
    glob_to_regex,
)
from .library import email_extractor_pattern, logger_pattern, type_index_pattern
from .template import (
    IdGenerator,
    TemplateContext,
    generate_id,
    parse_path,
    substitute_string,
    substitute_value,
    template,
    with_captures,
)

__all__ = [
    # Glob matching
    "SegmentType",
    "GlobSegment",
    "GlobPattern",
    "compile_glob",
    "glob_match",
    "glob_to_regex",
    "extract_glob_captures",
    # Templates
    "TemplateContext",
    "IdGenerator",
    "generate_id",
    "parse_path",
    "substitute_string",
    "substitute_value",
    "template",
    "with_captures",
    # Pattern engine
    "Document",
    "DocumentMetadata",
    "Scroll",
    "PatternDef",
    "CompiledPattern",
    "PatternCompileError",
    "PatternEngine",
    "compile_pattern",
    "apply_pattern",
    "serialize_payload",
    "load_pattern_defs",
    "pattern",
    # Presets
    "logger_pattern",
    "email_extractor_pattern",
    "type_index_pattern",
]
