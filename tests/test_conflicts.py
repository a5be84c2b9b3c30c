"""
Tests for Resource/App key conflict detection.
"""

from uuid import uuid4

from tooldeck.domain.errors import ErrorKind
from tooldeck.services.conflicts import (
    AppConflictSnapshot,
    ResourceConflictSnapshot,
    check_app_to_resource_conflicts,
    check_resource_to_app_conflicts,
    find_key_conflicts,
)


class TestFindKeyConflicts:
    def test_absent_side_is_skipped(self):
        assert find_key_conflicts((("a", "1"),), None, "Headers") is None
        assert find_key_conflicts(None, (("a", "1"),), "Headers") is None

    def test_values_are_ignored(self):
        found = find_key_conflicts((("a", "1"),), (("a", "completely different"),), "Headers")
        assert found == "Headers: a"

    def test_keys_are_sorted(self):
        found = find_key_conflicts(
            (("b", "1"), ("a", "1"), ("c", "1")),
            (("c", "2"), ("a", "2")),
            "Body parameters",
        )
        assert found == "Body parameters: a, c"


class TestResourceToAppConflicts:
    """Candidate App changes checked against one Resource."""

    def test_overlapping_url_parameter(self):
        resource = ResourceConflictSnapshot(url_parameters=(("token", "abc"),))

        result = check_resource_to_app_conflicts(resource, url_parameters=[("token", "xyz")])

        assert result.error.kind == ErrorKind.CONFLICT
        assert result.error.message == (
            "App cannot override existing Resource values: URL parameters: token"
        )

    def test_disjoint_keys_pass(self):
        resource = ResourceConflictSnapshot(
            url_parameters=(("token", "abc"),),
            headers=(("Accept", "application/json"),),
        )

        result = check_resource_to_app_conflicts(
            resource,
            url_parameters=[("page", "1")],
            headers=[("X-Trace", "1")],
            body=[("token", "same key, other category")],
        )

        assert result.is_ok

    def test_unchanged_categories_are_not_checked(self):
        resource = ResourceConflictSnapshot(headers=(("Accept", "*/*"),))

        result = check_resource_to_app_conflicts(resource, url_parameters=[("Accept", "x")])

        assert result.is_ok

    def test_all_categories_reported_together(self):
        resource = ResourceConflictSnapshot(
            url_parameters=(("token", "a"),),
            headers=(("Accept", "a"),),
            body=(("id", "a"),),
        )

        result = check_resource_to_app_conflicts(
            resource,
            url_parameters=[("token", "b")],
            headers=[("Accept", "b")],
            body=[("id", "b")],
        )

        assert result.error.message == (
            "App cannot override existing Resource values: "
            "URL parameters: token; Headers: Accept; Body parameters: id"
        )


class TestAppToResourceConflicts:
    """Candidate Resource changes checked against every bound App."""

    def test_no_bound_apps(self):
        assert check_app_to_resource_conflicts([], headers=[("Accept", "x")]).is_ok

    def test_conflicts_name_each_app(self):
        first = AppConflictSnapshot(app_id="app-1", headers=(("X-Key", "1"),))
        second = AppConflictSnapshot(
            app_id="app-2",
            headers=(("X-Key", "2"), ("X-Other", "2")),
        )
        clean = AppConflictSnapshot(app_id="app-3", headers=(("Accept", "3"),))

        result = check_app_to_resource_conflicts(
            [first, second, clean],
            headers=[("X-Other", "r"), ("X-Key", "r")],
        )

        assert result.error.kind == ErrorKind.CONFLICT
        assert result.error.message == (
            "Resource cannot override existing App values: "
            "App app-1 Headers: X-Key; App app-2 Headers: X-Key, X-Other"
        )

    def test_uuid_app_ids(self):
        app_id = uuid4()
        app = AppConflictSnapshot(app_id=app_id, body=(("name", "x"),))

        result = check_app_to_resource_conflicts([app], body=[("name", "y")])

        assert f"App {app_id} Body parameters: name" in result.error.message
