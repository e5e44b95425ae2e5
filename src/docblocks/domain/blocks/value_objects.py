"""Value objects for the block synchronisation bounded context."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import SyncConfigError

ID_TOKEN_RE = re.compile(r"<id:(.*?)>")

DEFAULT_BLOCK_START = r"\bSTART\b"
DEFAULT_BLOCK_END = r"\bEND\b\s*$"
DEFAULT_REGION_MARKER = r"^\s*<!--\s*(?:📖\s*)?(?P<id>[^\s<>]+?)(?:\s*📖)?\s*-->\s*$"


def split_lines(text: str, *, keepends: bool = False) -> List[str]:
    """Split on ``\\n`` only; ``\\r`` is dropped unless ``keepends`` is set.

    Unlike ``str.splitlines`` form feeds and other Unicode separators stay
    inside their line, so line numbers match what editors show.
    """

    if not text:
        return []
    lines = text.split("\n")
    if keepends:
        pieces = [line + "\n" for line in lines[:-1]]
        if lines[-1]:
            pieces.append(lines[-1])
        return pieces
    if not lines[-1]:
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass(frozen=True)
class Origin:
    """Where a block was declared: file plus 1-based marker lines."""

    path: Path
    start_line: int
    end_line: int

    def as_dict(self) -> Dict[str, object]:
        return {"path": self.path.as_posix(), "start_line": self.start_line, "end_line": self.end_line}

    def __str__(self) -> str:
        return f"{self.path}:{self.start_line}"


@dataclass(frozen=True)
class SourceBlock:
    """Identifier-tagged source text extracted for documentation."""

    id: str
    content: str
    origin: Origin = field(compare=False)

    def as_dict(self) -> Dict[str, object]:
        return {"id": self.id, "content": self.content, "origin": self.origin.as_dict()}


@dataclass(frozen=True)
class RegionSpan:
    """0-based line indexes of a region interior; ``end`` is exclusive."""

    start: int
    end: int


@dataclass(frozen=True)
class DocRegion:
    """Identifier-tagged region in a documentation file."""

    id: str
    path: Path
    span: RegionSpan
    existing_content: str
    open_line: int
    close_line: int
    newline: str = "\n"


def normalize_block(text: str) -> str:
    """Trim fully blank lines at both edges and drop the trailing newline.

    Interior blank lines and indentation are kept verbatim.
    """

    lines = split_lines(text)
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(lines[start:end])


def extract_id(line: str) -> Optional[str]:
    """Return the ``<id:NAME>`` token of a start line, or None when absent/blank."""

    match = ID_TOKEN_RE.search(line)
    if match is None:
        return None
    identifier = match.group(1).strip()
    return identifier or None


@dataclass(frozen=True)
class BlockPattern:
    """Start/end markers for source blocks plus optional content filters."""

    start: re.Pattern[str]
    end: re.Pattern[str]
    cleanups: Tuple[re.Pattern[str], ...] = ()
    strip_lines: Tuple[re.Pattern[str], ...] = ()

    def is_start(self, line: str) -> bool:
        return self.start.search(line) is not None

    def is_end(self, line: str) -> bool:
        return self.end.search(line) is not None

    def render(self, lines: Sequence[str]) -> str:
        kept = [line for line in lines if not any(rx.search(line) for rx in self.strip_lines)]
        text = "\n".join(kept)
        for regex in self.cleanups:
            text = regex.sub("", text)
        return normalize_block(text)

    @classmethod
    def default(cls) -> "BlockPattern":
        return cls(start=re.compile(DEFAULT_BLOCK_START), end=re.compile(DEFAULT_BLOCK_END))


@dataclass(frozen=True)
class RegionPattern:
    """Documentation region markers; both carry the region id in group ``id``."""

    start: re.Pattern[str]
    end: re.Pattern[str]

    @property
    def symmetric(self) -> bool:
        return self.start.pattern == self.end.pattern

    def match_start(self, line: str) -> Optional[str]:
        match = self.start.search(line)
        return match.group("id").strip() if match else None

    def match_end(self, line: str) -> Optional[str]:
        match = self.end.search(line)
        return match.group("id").strip() if match else None

    @classmethod
    def default(cls) -> "RegionPattern":
        marker = re.compile(DEFAULT_REGION_MARKER)
        return cls(start=marker, end=marker)


@dataclass(frozen=True)
class MarkerSyntax:
    """Every marker setting a parser needs, passed explicitly to each call."""

    block_patterns: Tuple[BlockPattern, ...]
    region: RegionPattern

    @classmethod
    def default(cls) -> "MarkerSyntax":
        return cls(block_patterns=(BlockPattern.default(),), region=RegionPattern.default())

    @classmethod
    def from_dict(
        cls,
        parser: Optional[Mapping[str, object]] = None,
        regions: Optional[Mapping[str, object]] = None,
    ) -> "MarkerSyntax":
        """Build syntax from the ``parser`` and ``regions`` config sections."""

        default = cls.default()
        block_patterns = default.block_patterns
        raw_patterns = (parser or {}).get("patterns")
        if raw_patterns:
            if not isinstance(raw_patterns, Iterable) or isinstance(raw_patterns, (str, bytes)):
                raise SyncConfigError("'parser.patterns' must be a list of pattern definitions")
            block_patterns = tuple(_build_block_pattern(item, index) for index, item in enumerate(raw_patterns))

        region = default.region
        if regions:
            start = _compile(regions.get("start"), "regions.start")
            end = _compile(regions.get("end"), "regions.end") if regions.get("end") else start
            for name, regex in (("regions.start", start), ("regions.end", end)):
                if "id" not in regex.groupindex:
                    raise SyncConfigError(f"'{name}' must define a named group (?P<id>...)")
            region = RegionPattern(start=start, end=end)
        return cls(block_patterns=block_patterns, region=region)


def _build_block_pattern(definition: object, index: int) -> BlockPattern:
    if not isinstance(definition, Mapping):
        raise SyncConfigError(f"parser.patterns[{index}] must be a mapping")
    return BlockPattern(
        start=_compile(definition.get("start"), f"parser.patterns[{index}].start"),
        end=_compile(definition.get("end"), f"parser.patterns[{index}].end"),
        cleanups=tuple(
            _compile(value, f"parser.patterns[{index}].cleanups") for value in definition.get("cleanups") or ()
        ),
        strip_lines=tuple(
            _compile(value, f"parser.patterns[{index}].strip_lines") for value in definition.get("strip_lines") or ()
        ),
    )


def _compile(value: object, name: str) -> re.Pattern[str]:
    if not isinstance(value, str) or not value:
        raise SyncConfigError(f"'{name}' must be a non-empty regular expression")
    try:
        return re.compile(value)
    except re.error as exc:
        raise SyncConfigError(f"'{name}' is not a valid regular expression: {exc}") from exc
