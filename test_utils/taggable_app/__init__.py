"""
Models used to exercise TaggableMixin in tests. This app has no migrations;
the test database creates its tables directly.
"""
