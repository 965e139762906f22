"""CoreDNS Corefile parsing and editing.

A Corefile is kept as a sequence of top-level server blocks and the raw
text between them, so rendering an unmodified Corefile reproduces the input
exactly.
"""

from dataclasses import dataclass, field

from cluster_bridge.exceptions import ClusterBridgeError
from cluster_bridge.models import ZoneForward


class CorefileError(ClusterBridgeError):
    """Exception raised when a Corefile cannot be parsed."""

    pass


def normalize_key(key: str) -> str:
    """Normalize a server block key for comparison (``dns://zone.:53`` -> ``zone:53``)."""
    key = key.lower()
    if key.startswith("dns://"):
        key = key[len("dns://") :]
    zone, _, port = key.partition(":")
    zone = zone.rstrip(".") or "."
    return f"{zone}:{port or '53'}"


@dataclass
class ServerBlock:
    """One top-level server block, with its original text."""

    keys: list[str]
    text: str

    def serves(self, key: str) -> bool:
        return [normalize_key(k) for k in self.keys] == [normalize_key(key)]


@dataclass
class Corefile:
    """An editable Corefile."""

    segments: list[str | ServerBlock] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "Corefile":
        """Split Corefile text into server blocks and interstitial text.

        Raises:
            CorefileError: If the braces are unbalanced
        """
        segments: list[str | ServerBlock] = []
        pos = 0
        depth = 0
        block_start = 0
        open_brace = 0
        i = 0

        while i < len(text):
            ch = text[i]
            if ch == "#":
                newline = text.find("\n", i)
                i = len(text) if newline == -1 else newline
                continue
            if ch == "{":
                if depth == 0:
                    block_start = max(text.rfind("\n", 0, i) + 1, pos)
                    open_brace = i
                depth += 1
            elif ch == "}":
                if depth == 0:
                    raise CorefileError(
                        "Unbalanced braces in Corefile", f"Unexpected '}}' at offset {i}"
                    )
                depth -= 1
                if depth == 0:
                    end = i + 1
                    if text.startswith("\n", end):
                        end += 1
                    if block_start > pos:
                        segments.append(text[pos:block_start])
                    keys = text[block_start:open_brace].split()
                    segments.append(ServerBlock(keys=keys, text=text[block_start:end]))
                    pos = end
                    i = end
                    continue
            i += 1

        if depth != 0:
            raise CorefileError(
                "Unbalanced braces in Corefile", f"{depth} server block(s) left unclosed"
            )
        if pos < len(text):
            segments.append(text[pos:])
        return cls(segments=segments)

    @property
    def blocks(self) -> list[ServerBlock]:
        return [s for s in self.segments if isinstance(s, ServerBlock)]

    def keys(self) -> list[str]:
        """All server block keys, in order, duplicates included."""
        return [key for block in self.blocks for key in block.keys]

    def render(self) -> str:
        return "".join(s if isinstance(s, str) else s.text for s in self.segments)

    def append(self, forward: ZoneForward) -> None:
        """Append a forwarding block without looking for an existing one.

        Running this twice leaves two identical blocks.
        """
        if self.segments and not self.render().endswith("\n"):
            self.segments.append("\n")
        self.segments.append(ServerBlock(keys=[forward.key], text=forward.render()))

    def upsert(self, forward: ZoneForward) -> None:
        """Insert a forwarding block, or replace the existing block for its zone.

        Extra blocks for the same zone, e.g. left behind by earlier appends,
        are dropped.
        """
        replacement = ServerBlock(keys=[forward.key], text=forward.render())
        found = False
        segments = []
        for segment in self.segments:
            if isinstance(segment, ServerBlock) and segment.serves(forward.key):
                if not found:
                    segments.append(replacement)
                    found = True
                continue
            segments.append(segment)
        self.segments = segments
        if not found:
            self.append(forward)
