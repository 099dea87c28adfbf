"""Render an LLM-style token stream, redrawing only what changed."""

from patitas import render
from patitas.nodes import Document

from rivulet import create_session

reply = (
    "# Release notes\n\n"
    "This release adds **streaming** support.\n\n"
    ":::{note}\nCommitted blocks are never reparsed.\n:::\n\n"
    "- faster merges\n- smaller snapshots\n\n"
    "Thanks for reading!"
)

session = create_session()
rendered: list[str] = []

for i in range(0, len(reply), 7):
    snap = session.write(reply[i : i + 7])
    # Committed blocks are stable: render each one exactly once.
    for block in snap.committed_blocks[len(rendered) :]:
        rendered.append(render(Document(location=block.location, children=(block,))))

snap = session.finalize()
for block in snap.committed_blocks[len(rendered) :]:
    rendered.append(render(Document(location=block.location, children=(block,))))

print("".join(rendered))
print("version:", snap.version, "blocks:", len(snap.committed_blocks))
