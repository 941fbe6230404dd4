import pytest

from endpoint_agent.paths import combine_paths, operation_id


class TestCombinePaths:
    @pytest.mark.parametrize(
        "base, method_path, expected",
        [
            ("", "", "/"),
            ("/api", "", "/api"),
            ("", "/x", "/x"),
            ("/api/", "/x", "/api/x"),
            ("/api", "x", "/api/x"),
            (None, None, "/"),
        ],
    )
    def test_combine(self, base, method_path, expected):
        assert combine_paths(base, method_path) == expected


class TestOperationId:
    def test_suffix_from_path(self):
        assert operation_id("UserController", "getUser", "/api/users/{id}") == "UserController_getUser_api_users_id"

    def test_root_path_has_no_suffix(self):
        assert operation_id("HomeController", "index", "/") == "HomeController_index"

    def test_multi_path_ids_differ(self):
        assert operation_id("A", "m", "/a") != operation_id("A", "m", "/b")
