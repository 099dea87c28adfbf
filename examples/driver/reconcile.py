"""Feed a renderer's inputs through StreamDriver."""

from rivulet import StreamDriver

driver = StreamDriver(streaming=True)

print(driver.update(chunks=["Intro\n\n"]))
print(driver.update(chunks=["Intro\n\n", "Body"]))
print(driver.update(chunks=["Intro\n\n", "Body"]))  # nothing new
print(driver.update(content="Intro\n\nBody text."))  # stream finished

snap = driver.snapshot
print("done:", snap.done, "blocks:", len(snap.committed_blocks))
