import pytest
from pydantic import ValidationError

from endpoint_agent.models import ParameterLocation


USER_CONTROLLER = """
package com.acme.web;

@RestController
@RequestMapping("/api/users")
public class UserController {

    /**
     * Returns every user.
     *
     * @return users
     */
    @GetMapping
    public List<UserDto> listUsers() { return null; }

    @GetMapping("/{id}")
    public ResponseEntity<UserDto> getUser(@PathVariable Long id) { return null; }

    @PostMapping(value = "/", consumes = "application/xml", produces = {"application/xml"})
    public UserDto createUser(@RequestBody UserDto user) { return null; }

    @Deprecated
    @DeleteMapping("/{id}")
    public void deleteUser(@PathVariable("id") Long userId) { }

    @RequestMapping(value = "/search", method = RequestMethod.POST)
    public List<UserDto> search(@RequestParam String q) { return null; }

    @RequestMapping("/legacy")
    public String legacy() { return null; }

    @GetMapping({"/a", "/b"})
    public String multi() { return null; }

    public String helper() { return null; }
}
"""


def _by_method(endpoints, name):
    return [e for e in endpoints if e.method_name == name]


class TestControllerDetection:
    def test_non_controller_is_ignored(self, extract):
        src = """
        @Service
        public class UserService {
            @GetMapping("/x")
            public String x() { return null; }
        }
        """
        assert extract(src) == []

    def test_plain_controller_marker(self, extract):
        src = """
        @Controller
        public class PageController {
            @GetMapping("/home")
            public String home() { return null; }
        }
        """
        eps = extract(src)
        assert [(e.http_method, e.path) for e in eps] == [("GET", "/home")]

    def test_fully_qualified_marker(self, extract):
        src = """
        @org.springframework.web.bind.annotation.RestController
        public class X {
            @org.springframework.web.bind.annotation.PutMapping("/x")
            public void x() { }
        }
        """
        assert [(e.http_method, e.path) for e in extract(src)] == [("PUT", "/x")]

    def test_nested_controller(self, extract):
        src = """
        public class Outer {
            @RestController
            @RequestMapping("/inner")
            public static class Inner {
                @PatchMapping("/p")
                public void p() { }
            }
        }
        """
        eps = extract(src)
        assert [(e.http_method, e.path, e.controller_class) for e in eps] == [("PATCH", "/inner/p", "Inner")]

    def test_unmapped_methods_are_skipped(self, extract):
        assert _by_method(extract(USER_CONTROLLER), "helper") == []


class TestMappings:
    def test_paths_and_verbs(self, extract):
        eps = extract(USER_CONTROLLER)
        got = [(e.http_method, e.path) for e in eps]
        assert got == [
            ("GET", "/api/users"),
            ("GET", "/api/users/{id}"),
            ("POST", "/api/users/"),
            ("DELETE", "/api/users/{id}"),
            ("POST", "/api/users/search"),
            ("GET", "/api/users/legacy"),
            ("GET", "/api/users/a"),
            ("GET", "/api/users/b"),
        ]

    def test_multi_path_gives_unique_operation_ids(self, extract):
        eps = _by_method(extract(USER_CONTROLLER), "multi")
        assert len(eps) == 2
        assert eps[0].operation_id != eps[1].operation_id

    def test_request_mapping_method_array(self, extract):
        src = """
        @RestController
        public class X {
            @RequestMapping(path = "/x", method = {RequestMethod.DELETE})
            public void x() { }
        }
        """
        assert extract(src)[0].http_method == "DELETE"

    def test_class_base_path_from_array(self, extract):
        src = """
        @RestController
        @RequestMapping(path = {"/v1", "/v2"})
        public class X {
            @GetMapping("/x")
            public String x() { return null; }
        }
        """
        assert extract(src)[0].path == "/v1/x"

    def test_no_class_mapping(self, extract):
        src = """
        @RestController
        public class X {
            @GetMapping
            public String root() { return null; }
        }
        """
        assert extract(src)[0].path == "/"


class TestEndpointFields:
    def test_description_from_javadoc(self, extract):
        ep = _by_method(extract(USER_CONTROLLER), "listUsers")[0]
        assert ep.description == "Returns every user."

    def test_no_javadoc(self, extract):
        ep = _by_method(extract(USER_CONTROLLER), "getUser")[0]
        assert ep.description is None

    def test_deprecated(self, extract):
        eps = extract(USER_CONTROLLER)
        assert _by_method(eps, "deleteUser")[0].deprecated is True
        assert _by_method(eps, "getUser")[0].deprecated is False

    def test_path_variable_name_override(self, extract):
        ep = _by_method(extract(USER_CONTROLLER), "deleteUser")[0]
        assert [(p.name, p.location, p.required) for p in ep.parameters] == [
            ("id", ParameterLocation.PATH, True)
        ]

    def test_void_has_no_content(self, extract):
        ep = _by_method(extract(USER_CONTROLLER), "deleteUser")[0]
        assert ep.responses["200"].content == {}
        assert ep.responses["200"].description == "Successful response"
        assert ep.produces == ()

    def test_declared_media_types_follow_inferred(self, extract):
        ep = _by_method(extract(USER_CONTROLLER), "createUser")[0]
        assert ep.consumes == ("application/json", "application/xml")
        assert ep.produces == ("application/json", "application/xml")

    def test_endpoint_is_immutable(self, extract):
        ep = _by_method(extract(USER_CONTROLLER), "createUser")[0]
        with pytest.raises(ValidationError):
            ep.path = "/other"
        with pytest.raises(AttributeError):
            ep.consumes.append("text/plain")
        assert isinstance(ep.parameters, tuple)

    def test_attribution(self, extract):
        ep = _by_method(extract(USER_CONTROLLER), "getUser")[0]
        assert ep.controller_class == "UserController"
        assert ep.operation_id == "UserController_getUser_api_users_id"
