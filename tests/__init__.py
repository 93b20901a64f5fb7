"""
Test suite for the TODO service.

This package contains:
- unit/: client, push harness and fake service tests with no running service
- integration/: REST tests for the /todos endpoints
- websocket/: push notification tests correlated with REST actions
- contracts/: payloads validated against contracts/todo_api.yaml
"""
