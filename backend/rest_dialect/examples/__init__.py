"""In-memory sample repositories used by the demo app and the tests."""
