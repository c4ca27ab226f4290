"""Double-array trie over field-path segment sequences.

The generated code embeds the arrays as a ``utilities.DoubleArray`` literal,
so the layout built here matches the one grpc-gateway's runtime expects.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field


@dataclass
class _Node:
    row: int
    col: int
    left: int
    right: int = 0

    def value(self, seqs: list[list[int]]) -> int:
        return seqs[self.row][self.col]

    def children(self, seqs: list[list[int]]) -> list[_Node]:
        result: list[_Node] = []
        last_val = -1
        last: _Node | None = None
        for i in range(self.left, self.right):
            if last_val == seqs[i][self.col + 1]:
                continue
            if last is not None:
                last.right = i
            last = _Node(row=i, col=self.col + 1, left=i)
            result.append(last)
            last_val = seqs[i][self.col + 1]
        if last is not None:
            last.right = self.right
        return result


@dataclass
class DoubleArray:
    """A trie answering whether a token sequence has a registered prefix."""

    encoding: dict[str, int] = field(default_factory=dict)
    base: list[int] = field(default_factory=list)
    check: list[int] = field(default_factory=list)

    @classmethod
    def build(cls, seqs: Sequence[Sequence[str]]) -> DoubleArray:
        da = cls()
        if not seqs:
            return da
        encoded = da._register_tokens(seqs)
        encoded.sort()
        root = _Node(row=-1, col=-1, left=0, right=len(encoded))
        da._add_seqs(encoded, 0, root)
        for i in range(len(da.base), 0, -1):
            if da.check[i - 1] != 0:
                del da.base[i:]
                del da.check[i:]
                break
        return da

    @property
    def terminator(self) -> int:
        return len(self.encoding)

    def _register_tokens(self, seqs: Sequence[Sequence[str]]) -> list[list[int]]:
        result = []
        for seq in seqs:
            encoded = []
            for token in seq:
                if token not in self.encoding:
                    self.encoding[token] = len(self.encoding)
                encoded.append(self.encoding[token])
            result.append(encoded)
        for encoded in result:
            encoded.append(self.terminator)
        return result

    def _ensure_size(self, i: int) -> None:
        while i >= len(self.base):
            grow = len(self.base) + 1
            self.base.extend([0] * grow)
            self.check.extend([0] * grow)

    def _add_seqs(self, seqs: list[list[int]], pos: int, node: _Node) -> None:
        self._ensure_size(pos)

        children = node.children(seqs)
        offset = 1
        while True:
            for child in children:
                j = offset + child.value(seqs)
                self._ensure_size(j)
                if self.check[j] != 0:
                    break
            else:
                break
            offset += 1

        self.base[pos] = offset
        for child in children:
            self.check[offset + child.value(seqs)] = pos + 1
        for child in children:
            code = child.value(seqs)
            if code == self.terminator:
                continue
            self._add_seqs(seqs, offset + code, child)

    def has_common_prefix(self, seq: Sequence[str]) -> bool:
        """Return True if some registered sequence is a prefix of ``seq``."""
        if not self.base:
            return False

        i = 0
        for token in seq:
            code = self.encoding.get(token)
            if code is None:
                break
            j = self.base[i] + code
            if len(self.check) <= j or self.check[j] != i + 1:
                break
            i = j

        j = self.base[i] + self.terminator
        return len(self.check) > j and self.check[j] == i + 1
