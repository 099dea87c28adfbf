"""Benchmark fixtures and configuration."""

from __future__ import annotations

import pytest


@pytest.fixture
def large_document() -> str:
    """Generate a large markdown document (~60KB)."""
    sections = []
    for i in range(100):
        sections.append(f"""
# Section {i}

This is paragraph {i} with **bold**, *italic*, and `code`.

- List item 1
- List item 2
- List item 3

```python
def function_{i}():
    return {i}
```

> This is a blockquote in section {i}.
> It has multiple lines.

:::{{note}}
Directive body {i}.
:::

---
""")
    return "\n".join(sections)


@pytest.fixture
def chunk_size() -> int:
    """Roughly one LLM token's worth of characters."""
    return 8
