import pytest

from endpoint_agent.classifier import classify_parameters, infer_response
from endpoint_agent.constants import ConstantIndex
from endpoint_agent.models import ParameterLocation


def _endpoint(extract, signature: str, returns: str = "void"):
    src = f"""
    @RestController
    public class OrderController {{
        @PostMapping("/orders")
        public {returns} handle({signature}) {{ }}
    }}
    """
    eps = extract(src)
    assert len(eps) == 1
    return eps[0]


def _body_schema(ep):
    assert ep.request_body is not None
    return ep.request_body.content["application/json"].schema_name


class TestRequestBody:
    @pytest.mark.parametrize(
        "signature",
        [
            "Principal p, @RequestBody OrderDto o",
            "OrderDto o, Principal p",
            "@RequestBody OrderDto o, Principal p",
        ],
    )
    def test_principal_never_wins(self, extract, signature):
        ep = _endpoint(extract, signature)
        assert _body_schema(ep) == "OrderDto"
        assert ep.parameters == ()
        assert ep.consumes == ("application/json",)

    @pytest.mark.parametrize(
        "context_type",
        [
            "Principal",
            "HttpServletRequest",
            "HttpServletResponse",
            "HttpSession",
            "Locale",
            "Authentication",
            "javax.servlet.http.HttpServletRequest",
        ],
    )
    def test_context_types_are_excluded(self, extract, context_type):
        ep = _endpoint(extract, f"{context_type} ctx, OrderDto order")
        assert _body_schema(ep) == "OrderDto"

    def test_only_context_types_means_no_body(self, extract):
        ep = _endpoint(extract, "HttpServletRequest req, Principal p")
        assert ep.request_body is None
        assert ep.consumes == ()

    def test_explicit_body_even_for_scalar(self, extract):
        ep = _endpoint(extract, "@RequestBody String raw, OrderDto other")
        assert _body_schema(ep) == "String"
        assert ep.request_body.required is True

    def test_generic_body_type_text_kept(self, extract):
        ep = _endpoint(extract, "@Valid @RequestBody List<OrderDto> orders")
        assert _body_schema(ep) == "List<OrderDto>"

    def test_first_candidate_wins(self, extract):
        ep = _endpoint(extract, "OrderDto first, CustomerDto second")
        assert _body_schema(ep) == "OrderDto"


class TestParameters:
    def test_unannotated_scalars_are_optional_query(self, extract):
        ep = _endpoint(extract, "String name, int page, Boolean flag")
        assert [(p.name, p.location, p.required) for p in ep.parameters] == [
            ("name", ParameterLocation.QUERY, False),
            ("page", ParameterLocation.QUERY, False),
            ("flag", ParameterLocation.QUERY, False),
        ]
        assert ep.request_body is None

    def test_query_required_rules(self, extract):
        ep = _endpoint(
            extract,
            '@RequestParam String a, @RequestParam(required = false) String b, '
            '@RequestParam(value = "cee", required = true) String c, @RequestParam(name = "dee") int d',
        )
        assert [(p.name, p.required) for p in ep.parameters] == [
            ("a", True), ("b", False), ("cee", True), ("dee", True),
        ]
        assert {p.location for p in ep.parameters} == {ParameterLocation.QUERY}

    def test_header(self, extract):
        ep = _endpoint(extract, '@RequestHeader("X-Trace") String trace, @RequestHeader(required = false) String lang')
        assert [(p.name, p.location, p.required) for p in ep.parameters] == [
            ("X-Trace", ParameterLocation.HEADER, True),
            ("lang", ParameterLocation.HEADER, False),
        ]

    def test_path_always_required(self, extract):
        ep = _endpoint(extract, "@PathVariable(required = false) Long id")
        assert ep.parameters[0].required is True

    def test_declared_type_text(self, extract):
        ep = _endpoint(extract, "@RequestParam List<String> tags")
        assert ep.parameters[0].type == "List<String>"


class TestUploads:
    def test_multipart_file(self, extract):
        ep = _endpoint(extract, '@RequestParam("file") MultipartFile file')
        p = ep.parameters[0]
        assert (p.name, p.location, p.required, p.type) == ("file", ParameterLocation.FORM_DATA, True, "MultipartFile")
        assert ep.request_body is None

    def test_multipart_array_optional(self, extract):
        ep = _endpoint(extract, '@RequestParam(value = "files", required = false) MultipartFile[] files')
        p = ep.parameters[0]
        assert (p.location, p.required, p.type) == (ParameterLocation.FORM_DATA, False, "MultipartFile[]")

    def test_fully_qualified_and_list(self, extract):
        ep = _endpoint(
            extract,
            "@RequestParam org.springframework.web.multipart.MultipartFile doc, "
            "@RequestParam List<MultipartFile> attachments, @RequestPart Part part",
        )
        assert [(p.name, p.location) for p in ep.parameters] == [
            ("doc", ParameterLocation.FORM_DATA),
            ("attachments", ParameterLocation.FORM_DATA),
        ]
        assert ep.parameters[0].type == "org.springframework.web.multipart.MultipartFile"
        # 어노테이션 없는 업로드 타입은 바디 후보에서 빠진다
        assert ep.request_body is None

    def test_plain_query_stays_query(self, extract):
        ep = _endpoint(extract, '@RequestParam("file") String file')
        assert ep.parameters[0].location == ParameterLocation.QUERY


class TestResponses:
    @pytest.mark.parametrize(
        "returns, schema",
        [
            ("ResponseEntity<OrderDto>", "OrderDto"),
            ("ResponseEntity<List<OrderDto>>", "List<OrderDto>"),
            ("ResponseEntity<?>", "Object"),
            ("ResponseEntity", "Object"),
            ("Optional<OrderDto>", "OrderDto"),
            ("Mono<OrderDto>", "OrderDto"),
            ("CompletableFuture<String>", "String"),
            ("List<OrderDto>", "List<OrderDto>"),
            ("OrderDto[]", "OrderDto[]"),
            ("String", "String"),
        ],
    )
    def test_schema(self, extract, returns, schema):
        ep = _endpoint(extract, "", returns=returns)
        assert ep.responses["200"].content["application/json"].schema_name == schema
        assert ep.produces == ("application/json",)

    def test_void_response(self):
        assert infer_response(None).content == {}


class TestClassifyDirect:
    def test_implicit_path_variables(self, method_of):
        m = method_of(
            """
            public class X {
                public Pet getPet(Integer ownerId, Integer petId, String q) { return null; }
            }
            """,
            "getPet",
        )
        out = classify_parameters(m, ConstantIndex(), path_variables=["ownerId", "petId"])
        assert [(p.name, p.location, p.required) for p in out.parameters] == [
            ("ownerId", ParameterLocation.PATH, True),
            ("petId", ParameterLocation.PATH, True),
            ("q", ParameterLocation.QUERY, False),
        ]
