"""Rule authoring with the lock state machine."""
