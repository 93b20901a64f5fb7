"""Test infrastructure shared by every suite: stack resolution and the fake service."""
