# zddkit

zddkit is a pure-Python library for building and manipulating decision
diagrams. It has no dependencies outside the standard library.

What it contains:

- `zddkit.nodes` – `NodeStore`, a shared table of reference-counted nodes
  with variables and levels, garbage collection (`gc`) and an operation
  cache (`read_cache` / `write_cache` for user operation codes 20 and up).
  Edges are plain integers; `FALSE` and `TRUE` are the two terminals.
- `zddkit.operations` – `Manager`, a `NodeStore` with Boolean operations on
  BDDs (`and_`, `or_`, `xor`, `not_`, `nand`, `nor`, `xnor`, `cofactor`,
  `univ`, `exist`, `imply`, `support`, `at0`, `at1`, `lshift`, `rshift`)
  and set-family operations on ZBDDs (`union`, `intersec`, `subtract`,
  `offset`, `onset`, `onset0`, `change`, `push`, `card`, `lit`, `length`,
  `card_mp16`).
- `zddkit.serialization` – `export`, `import_bdd`, `import_zbdd` in a
  plain-text token format, and `dump` / `vdump` for readable listings.
- `zddkit.nodetable` – `NodeTable`, a level-by-level table of nodes
  (row 0 holds the terminals `ZERO` and `ONE`), with Graphviz output
  (`dump_dot`), and `NodeTableHandler`, a copy-on-write handle to a table.
- `zddkit.sweeper` – `DdSweeper`, which removes nodes equivalent to the
  0-terminal from a `NodeTable` while it is being filled level by level.
- `zddkit.cardinality` – `BddCardinality` and `ZddCardinality`, evaluators
  that count solutions exactly.
- `zddkit.converters` – `ToBDD` and `ToZBDD`, evaluators that build
  `Manager` BDDs or ZBDDs from a node table's nodes.
- `zddkit.searcher` – `DepthFirstSearcher`, a random depth-first search for
  one instance accepted by a spec object.
- `zddkit.bignumber`, `zddkit.resources`, `zddkit.messages` – big unsigned
  counters, time and memory measurements, and indented progress messages.

## Installation

```
pip install zddkit
```

To run the tests:

```
pip install "zddkit[test]"
pytest
```

## Boolean functions

Every operation returns a new reference; release it with `free` when done.

```python
from zddkit.operations import Manager

m = Manager()
x = m.prime(m.new_var())
y = m.prime(m.new_var())

f = m.or_(x, y)
g = m.and_(f, m.not_(x))      # equivalent to (not x) and y
print(m.imply(g, y))          # True
```

## Families of sets

```python
from zddkit.nodes import TRUE
from zddkit.operations import Manager

m = Manager()
a, b = m.new_var(), m.new_var()

fa = m.change(TRUE, a)        # {{a}}   (TRUE is the family {{}})
fb = m.change(TRUE, b)        # {{b}}
family = m.union(fa, fb)      # {{a}, {b}}
print(m.card(family))         # 2
print(m.card_mp16(family))    # "2" (hexadecimal)
```

## Export and import

```python
import io
from zddkit.serialization import export, import_bdd

buf = io.StringIO()
export(m, buf, [f])
buf.seek(0)
roots = import_bdd(m, buf, 1)   # list of at most one root
```

## Node tables and counting

```python
from zddkit.cardinality import ZddCardinality
from zddkit.nodetable import ONE, ZERO, NodeTable

t = NodeTable(3)
a = t.add_node(1, [ZERO, ONE])  # {{1}}
r = t.add_node(2, [a, ONE])     # {{1}, {2}}

c = ZddCardinality()
c.initialize(2)
one, zero = c.eval_terminal(True), c.eval_terminal(False)
na = c.eval_node(1, [(zero, 0), (one, 0)])
nr = c.eval_node(2, [(na, 1), (one, 0)])
print(c.get_value(nr))          # 2
```

## Big numbers

```python
from zddkit.bignumber import BigNumber

n = BigNumber(1)
n.shift_left(100)
print(str(n))                 # 1267650600228229401496703205376
```

## Errors

Misuse of the node store (an invalid edge, a ZBDD node passed to a BDD
operation, an invalid variable or level) raises `zddkit.nodes.BDDError`.
A node table that is full even after garbage collection raises
`MemoryError`. `DepthFirstSearcher.find_one_instance` raises
`zddkit.searcher.NoInstanceError` when nothing is accepted.

## What the package does not do

There is no command-line program. The package also has no engine that runs
a spec top-down to fill a `NodeTable`, and no ready-made specs (such as
path or subgraph enumeration on a graph): `DdSweeper`, the cardinality
evaluators and the converters are driven by the caller, as in the example
above.

Progress messages go to standard error. They are off by default; enable
them with `zddkit.messages.show_messages(True)`.