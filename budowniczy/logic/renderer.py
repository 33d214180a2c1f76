"""Report Renderer: line-oriented markup to display blocks.

A fixed grammar, not a markdown parser: each non-blank line is classified by an
ordered rule list (first match wins) that ends in a plain-paragraph fallthrough,
so every input renders.
"""

import re
from dataclasses import asdict, dataclass
from typing import Callable, Optional, Union

# =============================================================================
# BLOCKS
# =============================================================================


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class Paragraph:
    text: str
    emphasized: bool = False


@dataclass(frozen=True)
class BulletItem:
    text: str


@dataclass(frozen=True)
class TableRow:
    cells: tuple[str, ...]


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class Callout:
    kind: str  # "warning" | "success"
    text: str


Block = Union[Heading, Paragraph, BulletItem, TableRow, Rule, Callout]

CALLOUT_WARNING = "warning"
CALLOUT_SUCCESS = "success"

WARNING_MARKERS = ("⚠️", "Uwaga")
SUCCESS_MARKERS = ("✅", "Korzyści")

# Section emoji the generators put in front of level-2 headings
_LEADING_EMOJI = re.compile(r"^(?:[\U0001F300-\U0001FAFF\u2600-\u27BF\u2B00-\u2BFF]\uFE0F?\s*)+")
_BOLD = re.compile(r"\*\*")
_EMPHASIS = re.compile(r"\*+")


def _strip_bold(text: str) -> str:
    return _BOLD.sub("", text)


def _strip_emphasis(text: str) -> str:
    return _EMPHASIS.sub("", text).strip()


# =============================================================================
# RULES
# =============================================================================

def _heading2(line: str) -> Optional[Block]:
    if line.startswith("## "):
        return Heading(2, _LEADING_EMOJI.sub("", line[3:].strip()).strip())
    return None


def _heading3(line: str) -> Optional[Block]:
    if line.startswith("### "):
        return Heading(3, line[4:].strip())
    return None


def _bold_line(line: str) -> Optional[Block]:
    stripped = line.strip()
    if len(stripped) > 4 and stripped.startswith("**") and stripped.endswith("**"):
        return Paragraph(_strip_bold(stripped).strip(), emphasized=True)
    return None


def _bullet(line: str) -> Optional[Block]:
    if line.startswith("- "):
        return BulletItem(_strip_bold(line[2:]).strip())
    return None


def _table_row(line: str) -> Optional[Block]:
    stripped = line.strip()
    if not stripped.startswith("|"):
        return None
    cells = tuple(cell.strip() for cell in stripped.strip("|").split("|"))
    if len(cells) >= 2:
        return TableRow(cells)
    return None


def _rule(line: str) -> Optional[Block]:
    if line.startswith("---"):
        return Rule()
    return None


def _callout(kind: str, markers: tuple[str, ...]) -> Callable[[str], Optional[Block]]:
    def match(line: str) -> Optional[Block]:
        if any(marker in line for marker in markers):
            return Callout(kind, _strip_bold(line).strip())
        return None
    return match


def _paragraph(line: str) -> Block:
    return Paragraph(_strip_emphasis(line))


RULES: tuple[Callable[[str], Optional[Block]], ...] = (
    _heading2,
    _heading3,
    _bold_line,
    _bullet,
    _table_row,
    _rule,
    _callout(CALLOUT_WARNING, WARNING_MARKERS),
    _callout(CALLOUT_SUCCESS, SUCCESS_MARKERS),
)


def classify_line(line: str) -> Block:
    for rule in RULES:
        block = rule(line)
        if block is not None:
            return block
    return _paragraph(line)


def render_document(text: str) -> list[Block]:
    """Parse a generated document into display blocks, in line order."""
    return [classify_line(line.rstrip("\r")) for line in (text or "").split("\n") if line.strip()]


# =============================================================================
# HELPERS
# =============================================================================

OFFLINE_MARKERS = ("TRYB OFFLINE", "tryb lokalny")


def detect_source(text: str) -> str:
    """'offline' for documents produced by the local fallback, else 'online'."""
    if any(marker in (text or "") for marker in OFFLINE_MARKERS):
        return "offline"
    return "online"


def blocks_to_dict(blocks: list[Block]) -> list[dict]:
    """JSON-friendly form: each block tagged with its type name."""
    result = []
    for block in blocks:
        data = asdict(block)
        if isinstance(block, TableRow):
            data["cells"] = list(block.cells)
        result.append({"type": type(block).__name__.lower(), **data})
    return result
