"""See how much text each strategy handed to the parser."""

from rivulet import create_session, profiled_merge

text = "\n\n".join(f"Paragraph {i} of a long streamed reply." for i in range(200))

with profiled_merge() as metrics:
    session = create_session()
    for i in range(0, len(text), 16):
        session.write(text[i : i + 16])
    session.finalize()

print(metrics.summary())
