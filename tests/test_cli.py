import json

from typer.testing import CliRunner

from endpoint_agent.cli import app

runner = CliRunner()

CONTROLLER = """
@RestController
@RequestMapping("/api/users")
public class UserController {
    @GetMapping("/{id}")
    public UserDto getUser(@PathVariable Long id) { return null; }
}
"""

CONTRACT = """
@RequestMapping("/api")
public interface UserApi {
    @GetMapping("/me")
    UserDto me();
}
"""


def _project(root, write_file, write_java):
    write_file(root / "pom.xml", "<project><artifactId>spring-boot-starter-web</artifactId></project>")
    write_java(root, "com/acme/UserController.java", CONTROLLER)
    return root


class TestScanCommand:
    def test_writes_json(self, tmp_path, write_file, write_java):
        project = _project(tmp_path / "proj", write_file, write_java)
        out = tmp_path / "out" / "endpoints.json"
        result = runner.invoke(app, ["scan", str(project), "--out", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["files_scanned"] == 1
        [ep] = data["endpoints"]
        assert (ep["http_method"], ep["path"]) == ("GET", "/api/users/{id}")
        assert ep["parameters"][0]["location"] == "path"

    def test_include_contracts_and_workers(self, tmp_path, write_file, write_java):
        project = _project(tmp_path / "proj", write_file, write_java)
        write_java(project, "com/acme/UserApi.java", CONTRACT)
        out = tmp_path / "endpoints.json"
        result = runner.invoke(app, [
            "scan", str(project), "--out", str(out), "--workers", "2", "--include-contracts",
        ])
        assert result.exit_code == 0, result.output
        owners = sorted(ep["controller_class"] for ep in json.loads(out.read_text())["endpoints"])
        assert owners == ["UserApi", "UserController"]

    def test_missing_path(self, tmp_path):
        result = runner.invoke(app, ["scan", str(tmp_path / "missing")])
        assert result.exit_code == 1

    def test_invalid_output_policy(self, tmp_path):
        result = runner.invoke(app, ["scan", str(tmp_path), "--microservices-output", "both"])
        assert result.exit_code == 2


class TestDetectCommand:
    def test_spring(self, tmp_path, write_file, write_java):
        project = _project(tmp_path, write_file, write_java)
        assert runner.invoke(app, ["detect", str(project)]).exit_code == 0

    def test_not_spring(self, tmp_path):
        assert runner.invoke(app, ["detect", str(tmp_path)]).exit_code == 1
