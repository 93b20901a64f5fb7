"""WebSocket notification tests."""
