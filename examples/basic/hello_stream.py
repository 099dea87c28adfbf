"""Stream Markdown in a few lines — committed blocks never change."""

from rivulet import create_session

session = create_session()
session.write("# Hello\n\nFirst para")
snap = session.write("graph.\n\nSecond")
print("committed:", [type(b).__name__ for b in snap.committed_blocks])
print("buffered:", [type(b).__name__ for b in snap.buffer_blocks])

snap = session.finalize(" paragraph.")
print("final:", [type(b).__name__ for b in snap.committed_blocks])
