#!/usr/bin/env python3
"""Reactive pattern engine over (key, type, data) documents.

This module turns declarative rules into derived documents:
- watch: glob over the document key
- g / v: guard and veto regexes over the serialized payload
- x: extract regex providing ${N} captures
- emit / emit_path / template: type, key and payload of the reaction
- then: cascade the reaction back through the engine

Example:
    >>> engine = PatternEngine()
    >>> engine.add({
    ...     "name": "audit",
    ...     "watch": "/users/**",
    ...     "emit": "audit@v1",
    ...     "emit_path": "/audit/${path.1}",
    ...     "template": {"user_id": "${path.1}"},
    ... })
    >>> [r.key for r in engine.apply(Document("/users/123", "user@v1", {}))]
    ['/audit/123']
"""

import json
from collections import deque
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Pattern, Set, Tuple, Union

import yaml

from pikesre.core.constants import REACTION_VERSION, ConfigKey, ErrorCode
from pikesre.core.validators import ValidationError, validate_pattern_def, validate_regex
from pikesre.infrastructure.config_manager import ConfigError, get_config_manager
from pikesre.infrastructure.logger import Logger, get_logger
from pikesre.rules.glob import GlobPattern, compile_glob
from pikesre.rules.template import IdFactory, TemplateContext, parse_path, substitute_string, substitute_value


class PatternCompileError(ValidationError):
    """A rule definition that cannot be compiled."""

    def __init__(
        self,
        message: str,
        pattern_name: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INVALID_INPUT,
    ):
        super().__init__(message, error_code)
        self.pattern_name = pattern_name


@dataclass
class DocumentMetadata:
    """Optional bookkeeping attached to a document."""

    version: Optional[int] = None
    hash: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    produced_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class Document:
    """A keyed, typed payload flowing through the engine."""

    key: str
    type: str
    data: Any = None
    metadata: Optional[DocumentMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"key": self.key, "type": self.type, "data": self.data}
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Document":
        """Build a document from a mapping with key/type/data/metadata."""
        try:
            key, doc_type = data["key"], data["type"]
        except KeyError as e:
            raise ValidationError(f"Document missing field: {e}")

        metadata = data.get("metadata")
        return cls(
            key=key,
            type=doc_type,
            data=data.get("data"),
            metadata=DocumentMetadata(**metadata) if metadata is not None else None,
        )


# Document stores that call their records scrolls use this name
Scroll = Document


@dataclass
class PatternDef:
    """A declarative rule definition, as written in YAML or JSON."""

    name: str
    watch: str
    emit: str
    emit_path: str
    template: Any = None
    x: Optional[str] = None
    g: Optional[str] = None
    v: Optional[str] = None
    then: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PatternDef":
        """Validate a mapping and build a PatternDef from it.

        Raises:
            PatternCompileError: If the mapping is not a valid definition
        """
        name = data.get(ConfigKey.RULE_NAME) if isinstance(data, Mapping) else None
        try:
            validate_pattern_def(data)
        except ValidationError as e:
            raise PatternCompileError(e.message, name)

        return cls(
            name=data[ConfigKey.RULE_NAME],
            watch=data[ConfigKey.RULE_WATCH],
            emit=data[ConfigKey.RULE_EMIT],
            emit_path=data[ConfigKey.RULE_EMIT_PATH],
            template=data.get(ConfigKey.RULE_TEMPLATE),
            x=data.get(ConfigKey.RULE_EXTRACT),
            g=data.get(ConfigKey.RULE_GUARD),
            v=data.get(ConfigKey.RULE_VETO),
            then=data.get(ConfigKey.RULE_THEN),
        )


@dataclass(frozen=True)
class CompiledPattern:
    """A rule with its glob and regexes compiled."""

    name: str
    watch: str
    glob: GlobPattern
    emit: str
    emit_path: str
    template: Any = None
    x: Optional[Pattern[str]] = None
    g: Optional[Pattern[str]] = None
    v: Optional[Pattern[str]] = None
    then: Optional[str] = None

    def watch_matcher(self, path: str) -> bool:
        return self.glob.matches(path)

    def admits(self, payload: str) -> bool:
        """Apply guard and veto to a serialized payload."""
        if self.g is not None and self.g.search(payload) is None:
            return False
        if self.v is not None and self.v.search(payload) is not None:
            return False
        return True


PatternDefLike = Union[PatternDef, Mapping[str, Any]]


def _compile_optional(source: Optional[str], name: str) -> Optional[Pattern[str]]:
    if not source:
        return None
    try:
        return validate_regex(source)
    except ValidationError as e:
        raise PatternCompileError(f"Pattern '{name}': {e.message}", name)


def compile_pattern(defn: PatternDefLike) -> CompiledPattern:
    """Compile a rule definition.

    Args:
        defn: PatternDef or mapping with the same fields

    Returns:
        Compiled pattern ready for apply_pattern

    Raises:
        PatternCompileError: If the definition or one of its regexes is invalid
    """
    if isinstance(defn, PatternDef):
        defn = defn.to_dict()
    defn = PatternDef.from_dict(defn)

    return CompiledPattern(
        name=defn.name,
        watch=defn.watch,
        glob=compile_glob(defn.watch),
        emit=defn.emit,
        emit_path=defn.emit_path,
        template=defn.template,
        x=_compile_optional(defn.x, defn.name),
        g=_compile_optional(defn.g, defn.name),
        v=_compile_optional(defn.v, defn.name),
        then=defn.then,
    )


def pattern(defn: PatternDefLike) -> CompiledPattern:
    """Shorthand for compile_pattern."""
    return compile_pattern(defn)


def serialize_payload(data: Any) -> str:
    """Render a payload as text for regex matching.

    Strings pass through; anything else becomes compact JSON with keys
    in insertion order and non-ASCII characters kept.
    """
    if isinstance(data, str):
        return data
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False, default=str)


def apply_pattern(
    compiled: CompiledPattern,
    document: Document,
    id_factory: Optional[IdFactory] = None,
) -> Optional[Document]:
    """Evaluate one rule against one document.

    Args:
        compiled: Compiled rule
        document: Incoming document
        id_factory: Identifier source for ${uuid}

    Returns:
        The reaction document, or None when the rule does not fire
    """
    if not compiled.watch_matcher(document.key):
        return None

    payload = serialize_payload(document.data)

    if not compiled.admits(payload):
        return None

    captures: List[str] = []
    if compiled.x is not None:
        match = compiled.x.search(payload)
        if match is not None:
            captures = [match.group(0)] + [group or "" for group in match.groups()]

    ctx = TemplateContext(
        captures=captures,
        path=parse_path(document.key),
        data=document.data if isinstance(document.data, Mapping) else {},
        input=payload,
    )

    return Document(
        key=substitute_string(compiled.emit_path, ctx, id_factory),
        type=compiled.emit,
        data=substitute_value(compiled.template, ctx, id_factory),
        metadata=DocumentMetadata(version=REACTION_VERSION, produced_by=compiled.name),
    )


def load_pattern_defs(file_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Read rule definitions from a YAML or JSON file.

    The file holds either a list of definitions or a mapping whose
    ``patterns`` key holds that list.

    Raises:
        ConfigError: If the file is missing, unparseable or malformed
    """
    path = Path(file_path).expanduser()

    if not path.exists():
        raise ConfigError(f"Pattern file not found: {file_path}", ErrorCode.NOT_FOUND)

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML parse error in {file_path}: {e}", ErrorCode.INVALID_INPUT)
    except OSError as e:
        raise ConfigError(f"Error loading patterns {file_path}: {e}", ErrorCode.INTERNAL_ERROR)

    if content is None:
        return []
    if isinstance(content, dict):
        content = content.get("patterns", [])
    if not isinstance(content, list):
        raise ConfigError(f"Invalid pattern file format in {file_path}", ErrorCode.INVALID_INPUT)

    return content


class PatternEngine:
    """Registry of compiled rules with cascading evaluation.

    Rules are evaluated in registration order. A reaction re-enters the
    engine when its rule names a registered ``then`` target; a visited
    set keyed by (key, type) stops cycles.
    """

    def __init__(self, id_factory: Optional[IdFactory] = None, logger: Optional[Logger] = None):
        """Initialize pattern engine.

        Args:
            id_factory: Identifier source for ${uuid} (defaults to generate_id)
            logger: Logger for engine events (defaults to the global logger)
        """
        self._patterns: Dict[str, CompiledPattern] = {}
        self._id_factory = id_factory
        self._logger = logger or get_logger()

    def add(self, defn: PatternDefLike) -> CompiledPattern:
        """Compile and register a rule.

        A rule with the same name is replaced in place.

        Raises:
            PatternCompileError: If the definition is invalid
        """
        compiled = compile_pattern(defn)
        replaced = compiled.name in self._patterns
        self._patterns[compiled.name] = compiled
        self._logger.debug("Pattern added", pattern=compiled.name, watch=compiled.watch, replaced=replaced)
        return compiled

    def remove(self, name: str) -> bool:
        """Remove a rule by name.

        Returns:
            True if the rule was registered
        """
        if self._patterns.pop(name, None) is None:
            return False
        self._logger.debug("Pattern removed", pattern=name)
        return True

    def get(self, name: str) -> Optional[CompiledPattern]:
        return self._patterns.get(name)

    def list(self) -> List[str]:
        """Return rule names in registration order."""
        return list(self._patterns)

    def clear(self) -> None:
        self._patterns.clear()

    @property
    def size(self) -> int:
        return len(self._patterns)

    def apply(self, document: Document) -> List[Document]:
        """Evaluate every rule against document, following cascades.

        The registry is read once at entry, so rules added or removed
        while applying take effect on the next call.

        Returns:
            All reactions in breadth-first order
        """
        patterns = dict(self._patterns)
        reactions: List[Document] = []
        visited: Set[Tuple[str, str]] = set()
        queue: Deque[Document] = deque([document])

        while queue:
            current = queue.popleft()

            seen = (current.key, current.type)
            if seen in visited:
                self._logger.debug("Cascade skipped", key=current.key, type=current.type)
                continue
            visited.add(seen)

            for compiled in patterns.values():
                reaction = apply_pattern(compiled, current, self._id_factory)
                if reaction is None:
                    continue

                reactions.append(reaction)
                self._logger.debug("Reaction emitted", pattern=compiled.name, key=reaction.key, type=reaction.type)

                if compiled.then and compiled.then in patterns:
                    queue.append(reaction)

        return reactions

    def apply_one(self, name: str, document: Document) -> Optional[Document]:
        """Evaluate a single named rule, without cascading."""
        compiled = self._patterns.get(name)
        if compiled is None:
            return None
        return apply_pattern(compiled, document, self._id_factory)

    def would_match(self, document: Document) -> List[str]:
        """Return names of rules whose watch, guard and veto admit document."""
        payload = serialize_payload(document.data)
        return [
            name
            for name, compiled in self._patterns.items()
            if compiled.watch_matcher(document.key) and compiled.admits(payload)
        ]

    def load_defs(self, defs: Iterable[PatternDefLike]) -> List[CompiledPattern]:
        """Register several rule definitions in order."""
        return [self.add(defn) for defn in defs]

    def load_file(self, file_path: Union[str, Path]) -> List[CompiledPattern]:
        """Register rule definitions read from a YAML or JSON file."""
        compiled = self.load_defs(load_pattern_defs(file_path))
        self._logger.debug("Pattern file loaded", file=str(file_path), patterns=len(compiled))
        return compiled

    @classmethod
    def from_config(
        cls,
        config: Any = None,
        id_factory: Optional[IdFactory] = None,
        logger: Optional[Logger] = None,
    ) -> "PatternEngine":
        """Build an engine from configuration.

        Inline definitions under ``pikesre.engine.patterns`` are registered
        first, then files listed under ``pikesre.engine.pattern_files``.

        Args:
            config: ConfigManager (defaults to the global one)
            id_factory: Identifier source for ${uuid}
            logger: Logger for engine events
        """
        config = config or get_config_manager()
        engine = cls(id_factory=id_factory, logger=logger)

        engine.load_defs(config.get(ConfigKey.ENGINE_PATTERNS) or [])

        files = config.get(ConfigKey.ENGINE_PATTERN_FILES) or []
        if isinstance(files, str):
            files = [files]
        for file_path in files:
            engine.load_file(file_path)

        return engine

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, name: object) -> bool:
        return name in self._patterns
