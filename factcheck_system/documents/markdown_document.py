"""Markdown document with optional YAML front matter.

The front matter block (opening ``---`` line through closing ``---`` line,
inclusive) is kept verbatim so that rewriting the body never reformats
metadata. Only ``body`` is meant to be edited.

Usage:
    doc = MarkdownDocument.load("drafts/2026-10-01-museum.md")
    doc.metadata["venue"]
    doc = doc.with_body(doc.body.replace("10:00", "09:00", 1))
    doc.save()
"""

import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)

UNTITLED = "Untitled"


class FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader with YAML 1.2 numbers: ``10:00`` stays a string, not 600."""


_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"

FrontMatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in (_INT_TAG, _FLOAT_TAG)]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
FrontMatterLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"^(?:[-+]?(?:0|[1-9][0-9_]*)|0x[0-9a-fA-F_]+)$"),
    list("-+0123456789"),
)
FrontMatterLoader.add_implicit_resolver(
    _FLOAT_TAG,
    re.compile(
        r"^(?:[-+]?(?:\.[0-9]+|[0-9][0-9_]*\.[0-9_]*)(?:[eE][-+]?[0-9]+)?"
        r"|[-+]?[0-9][0-9_]*[eE][-+]?[0-9]+"
        r"|[-+]?\.(?:inf|Inf|INF)|\.(?:nan|NaN|NAN))$"
    ),
    list("-+0123456789."),
)


class DocumentError(Exception):
    """Document cannot be read or its front matter cannot be parsed."""


@dataclass(frozen=True)
class MarkdownDocument:
    body: str
    front_matter_raw: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    path: Optional[Path] = None

    @property
    def title(self) -> str:
        title = self.metadata.get("title")
        return str(title) if title else UNTITLED

    @property
    def content(self) -> str:
        """Full document text: front matter block followed by the body."""
        return self.front_matter_raw + self.body

    @classmethod
    def parse(cls, text: str, path: Optional[Path] = None) -> "MarkdownDocument":
        match = _FRONT_MATTER.match(text)
        if not match:
            return cls(body=text, path=path)

        try:
            metadata = yaml.load(match.group(1), Loader=FrontMatterLoader) or {}
        except yaml.YAMLError as e:
            raise DocumentError(f"invalid front matter in {path or '<text>'}: {e}") from e

        if not isinstance(metadata, dict):
            raise DocumentError(f"front matter must be a mapping in {path or '<text>'}")

        return cls(
            body=text[match.end():],
            front_matter_raw=match.group(0),
            metadata=metadata,
            path=path,
        )

    @classmethod
    def load(cls, path: str | Path) -> "MarkdownDocument":
        path = Path(path)
        try:
            # newline="" keeps CRLF files byte-identical on rewrite
            with open(path, "r", encoding="utf-8", newline="") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentError(f"cannot read {path}: {e}") from e
        return cls.parse(text, path=path)

    def with_body(self, body: str) -> "MarkdownDocument":
        return replace(self, body=body)

    def save(self, path: str | Path | None = None) -> Path:
        """Write the document. Write errors propagate."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise DocumentError("document has no path to save to")
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(self.content)
        return target
