import heapq
import io
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

MAX_SYMBOL = 255

_SYMBOL_LINE = re.compile(r"-?[0-9]+")


class HuffmanError(ValueError):
    """Base class for every failure raised by the Huffman core."""


class EmptyAlphabetError(HuffmanError):
    pass


class MalformedTableError(HuffmanError):
    pass


class TruncatedStreamError(HuffmanError):
    pass


class InvalidSymbolError(HuffmanError):
    pass


@dataclass(frozen=True)
class Leaf: # carries one symbol, no children
    symbol: int
    weight: int = 0


@dataclass(frozen=True)
class Internal: # exactly two children, weight = left.weight + right.weight
    weight: int
    left: "Node"
    right: "Node"


Node = Union[Leaf, Internal]


def _check_symbol(symbol: int) -> int:
    if not 0 <= symbol <= MAX_SYMBOL:
        raise InvalidSymbolError(f"symbol {symbol} outside 0..{MAX_SYMBOL}")
    return symbol


def _weight_items(frequency_table) -> Iterable[Tuple[int, int]]:
    # dict of symbol -> weight, or an indexed table where index = symbol
    if isinstance(frequency_table, Mapping):
        return frequency_table.items()
    return enumerate(frequency_table)


def build_huffman_tree(frequency_table: Union[Mapping[int, int], Sequence[int]]) -> Node:
    """
    Build an optimal prefix-code tree from symbol weights.

    Symbols with weight <= 0 are left out of the alphabet. The two lightest
    nodes are merged until one remains; the first one popped becomes the
    left child. A single-symbol alphabet yields a bare Leaf as root.
    """
    priority_queue: List[Tuple[int, int, Node]] = []
    for symbol, weight in _weight_items(frequency_table):
        if weight > 0:
            leaf = Leaf(_check_symbol(symbol), weight)
            priority_queue.append((weight, len(priority_queue), leaf))

    if not priority_queue:
        raise EmptyAlphabetError("no symbol has a positive weight")

    heapq.heapify(priority_queue)
    order = len(priority_queue) # insertion counter keeps heap entries comparable

    while len(priority_queue) > 1:
        left_weight, _, left = heapq.heappop(priority_queue)
        right_weight, _, right = heapq.heappop(priority_queue)
        merged = Internal(left_weight + right_weight, left, right)
        heapq.heappush(priority_queue, (merged.weight, order, merged))
        order += 1

    return priority_queue[0][2] # root of the tree


def iter_leaves(root: Node) -> Iterator[Tuple[Leaf, str]]:
    """Yield (leaf, path) pairs in preorder, left subtree before right."""
    stack: List[Tuple[Node, str]] = [(root, "")]
    while stack:
        node, path = stack.pop()
        if isinstance(node, Leaf):
            yield node, path
        else:
            # right pushed first so the left subtree comes out first
            stack.append((node.right, path + "1"))
            stack.append((node.left, path + "0"))


def generate_huffman_codes(root: Node) -> Dict[int, str]:
    return {leaf.symbol: path for leaf, path in iter_leaves(root)}


def code_lengths(root: Node) -> Dict[int, int]:
    return {leaf.symbol: len(path) for leaf, path in iter_leaves(root)}


def weighted_path_length(root: Node) -> int:
    # sum of weight * depth over all leaves, the quantity Huffman minimizes
    return sum(leaf.weight * len(path) for leaf, path in iter_leaves(root))


def tree_depth(root: Node) -> int:
    return max(len(path) for _, path in iter_leaves(root))


def count_nodes(root: Node) -> Tuple[int, int]:
    """Return (leaf count, internal node count)."""
    leaves = internals = 0
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Leaf):
            leaves += 1
        else:
            internals += 1
            stack.append(node.right)
            stack.append(node.left)
    return leaves, internals


def save_code_table(root: Node, output) -> None:
    """
    Write the code table of `root` to a text sink.

    Each leaf becomes two lines: its symbol in decimal, then its path as
    a string of 0/1 (empty for a single-leaf tree). Branches write nothing.
    """
    for leaf, path in iter_leaves(root):
        output.write(f"{leaf.symbol}\n")
        output.write(f"{path}\n")


class _Scaffold:
    # mutable stand-in for a node while the table is still being read
    __slots__ = ("symbol", "left", "right")

    def __init__(self, symbol: Optional[int] = None):
        self.symbol = symbol
        self.left: Optional["_Scaffold"] = None
        self.right: Optional["_Scaffold"] = None


def _read_pairs(lines: Iterable[str]) -> Iterator[Tuple[int, int, str]]:
    # yields (line number of the symbol line, symbol, path)
    it = iter(lines)
    line_no = 0
    for symbol_line in it:
        line_no += 1
        symbol_text = symbol_line.rstrip("\r\n")
        if not _SYMBOL_LINE.fullmatch(symbol_text):
            raise MalformedTableError(f"line {line_no}: symbol {symbol_text!r} is not a decimal integer")
        symbol = int(symbol_text)

        path_line = next(it, None)
        if path_line is None:
            raise MalformedTableError(f"line {line_no}: symbol {symbol} has no path line")
        line_no += 1
        path = path_line.rstrip("\r\n")
        if path.strip("01"):
            raise MalformedTableError(f"line {line_no}: path {path!r} may only contain 0 and 1")

        yield line_no - 1, _check_symbol(symbol), path


def _place(root: Optional[_Scaffold], line_no: int, symbol: int, path: str) -> _Scaffold:
    if not path:
        if root is not None:
            raise MalformedTableError(f"line {line_no}: empty path is only allowed in a single-entry table")
        return _Scaffold(symbol)

    if root is None:
        root = _Scaffold()
    elif root.symbol is not None:
        raise MalformedTableError(f"line {line_no}: empty path is only allowed in a single-entry table")

    node = root
    for depth, bit in enumerate(path, start=1):
        attr = "left" if bit == "0" else "right"
        child = getattr(node, attr)
        last = depth == len(path)
        if child is None:
            child = _Scaffold(symbol) if last else _Scaffold()
            setattr(node, attr, child)
        elif last or child.symbol is not None:
            # landing on an occupied slot, or walking through another leaf
            raise MalformedTableError(f"line {line_no}: path {path!r} for symbol {symbol} collides with an earlier entry")
        node = child
    return root


def _freeze(root: _Scaffold) -> Node:
    # post-order rebuild into immutable nodes; reconstructed weights are 0
    built: Dict[int, Node] = {}
    stack: List[Tuple[_Scaffold, str, bool]] = [(root, "", False)]
    while stack:
        node, path, expanded = stack.pop()
        if node.symbol is not None:
            built[id(node)] = Leaf(node.symbol, 0)
        elif node.left is None or node.right is None:
            side = "0" if node.left is None else "1"
            raise MalformedTableError(f"code table is incomplete: nothing at path {path + side!r}")
        elif expanded:
            built[id(node)] = Internal(0, built.pop(id(node.left)), built.pop(id(node.right)))
        else:
            stack.append((node, path, True))
            stack.append((node.right, path + "1", False))
            stack.append((node.left, path + "0", False))
    return built[id(root)]


def load_code_table(lines: Iterable[str]) -> Node:
    """
    Rebuild a tree from (symbol, path) line pairs written by save_code_table.

    Only the paths matter: pairs may come in any order and the weights of
    the rebuilt nodes are 0. Any malformed or inconsistent input raises
    MalformedTableError and no tree is returned.
    """
    if isinstance(lines, str):
        lines = lines.splitlines(keepends=True) # whole table passed as one string

    root: Optional[_Scaffold] = None
    for line_no, symbol, path in _read_pairs(lines):
        root = _place(root, line_no, symbol, path)

    if root is None:
        raise MalformedTableError("code table has no entries")
    return _freeze(root)


def _emit(output, symbol: int) -> None:
    if hasattr(output, "append"):
        output.append(symbol) # bytearray / list sink
    elif isinstance(output, (io.RawIOBase, io.BufferedIOBase)):
        output.write(bytes((symbol,))) # binary file, BytesIO, sys.stdout.buffer
    else:
        output.write(symbol)


def translate(root: Node, bits, output, strict: bool = True) -> int:
    """
    Decode symbols from `bits` by walking the tree, writing each to `output`.

    `bits` must offer has_next_bit() and next_bit(). Decoding stops when the
    source runs dry. If that happens partway down a path, a strict decode
    raises TruncatedStreamError; otherwise the partial symbol is dropped.

    When the root itself is a leaf no bits are ever read: each successful
    has_next_bit() check emits the symbol, so the source alone bounds how
    many symbols come out.

    Returns the number of symbols written.
    """
    emitted = 0
    node = root
    while bits.has_next_bit():
        while not isinstance(node, Leaf):
            if not bits.has_next_bit():
                if strict:
                    raise TruncatedStreamError(f"bit stream ended partway through a code after {emitted} symbols")
                return emitted
            node = node.left if bits.next_bit() == 0 else node.right
        _emit(output, node.symbol)
        emitted += 1
        node = root
    return emitted
