"""Tests for pipeline parameter resolution."""

import pytest

from pipeline_cli.exceptions import ValidationError
from pipeline_cli.models import ApplicationType
from pipeline_cli.resolver import DEFAULT_NOTIFICATION_ADDRESS, resolve


class TestRequiredParameters:
    @pytest.mark.parametrize("raw, missing", [
        ({"appType": "springboot"}, ["appName"]),
        ({"appName": "foo"}, ["appType"]),
        ({}, ["appName", "appType"]),
        ({"appName": "", "appType": "  "}, ["appName", "appType"]),
        ({"appName": None, "appType": None, "namespace": "apps"}, ["appName", "appType"]),
    ])
    def test_lists_every_missing_field(self, raw, missing):
        with pytest.raises(ValidationError) as exc_info:
            resolve(raw)

        assert exc_info.value.fields == missing
        for name in missing:
            assert name in exc_info.value.message

    def test_invalid_app_type_names_value_and_valid_set(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve({"appName": "foo", "appType": "django"})

        message = exc_info.value.message
        assert "'django'" in message
        for app_type in ApplicationType.values():
            assert app_type in message

    def test_unknown_parameter_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve({"appName": "foo", "appType": "springboot", "namesapce": "apps"})

        assert exc_info.value.fields == ["namesapce"]


class TestDefaults:
    def test_springboot_scenario(self):
        config = resolve({"appName": "foo", "appType": "springboot"})

        assert config.expose_port == 8080
        assert config.app_type.requires_compile_step is True
        assert config.namespace == "intsys"
        assert config.memory_limit == "512Mi"

    def test_explicit_port_overrides_default(self):
        config = resolve({"appName": "bar", "appType": "angular-nginx", "exposePort": "8081"})

        assert config.expose_port == 8081
        assert config.app_type.requires_compile_step is False

    @pytest.mark.parametrize("app_type, port", [
        ("angular-nginx", 80),
        ("react-nginx", 80),
        ("springboot", 8080),
        ("tomcat-war", 8080),
        ("react-normal", 3000),
    ])
    def test_default_port_by_type(self, app_type, port):
        assert resolve({"appName": "foo", "appType": app_type}).expose_port == port

    @pytest.mark.parametrize("app_type", ApplicationType.values())
    def test_explicit_port_always_wins(self, app_type):
        assert resolve({"appName": "foo", "appType": app_type, "exposePort": 9090}).expose_port == 9090

    def test_optional_defaults(self):
        config = resolve({"appName": "foo", "appType": "react-normal"})

        assert config.environment == "stg"
        assert config.harbour_secret == "harbor-intsys"
        assert config.cpu_limit is None
        assert config.sonar_enabled is False
        assert config.sonar_project_key == "foo"
        assert config.sonar_project_name == "foo"
        assert config.success_email == DEFAULT_NOTIFICATION_ADDRESS
        assert config.failure_cc == DEFAULT_NOTIFICATION_ADDRESS
        assert config.build_tool_image == "maven:3.9.6-amazoncorretto-21"
        assert config.scan_tool_image == "aquasec/trivy:latest"

    @pytest.mark.parametrize("cpu", [None, "", "null"])
    def test_unset_cpu_limit_is_absent(self, cpu):
        assert resolve({"appName": "foo", "appType": "springboot", "cpuLimit": cpu}).cpu_limit is None

    def test_sonar_flag_from_string(self):
        config = resolve({
            "appName": "foo",
            "appType": "springboot",
            "sonarEnabled": "true",
            "sonarProjectKey": "org:foo",
        })

        assert config.sonar_enabled is True
        assert config.sonar_project_key == "org:foo"
        assert config.sonar_project_name == "foo"

    def test_resolution_is_deterministic(self):
        raw = {"appName": "foo", "appType": "tomcat-war", "cpuLimit": "500m"}
        assert resolve(raw) == resolve(raw)


class TestInvalidValues:
    @pytest.mark.parametrize("port", ["abc", "0", "-1", "70000", True])
    def test_invalid_port(self, port):
        with pytest.raises(ValidationError) as exc_info:
            resolve({"appName": "foo", "appType": "springboot", "exposePort": port})
        assert exc_info.value.fields == ["exposePort"]

    def test_invalid_app_name(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve({"appName": "Foo_App", "appType": "springboot"})
        assert exc_info.value.fields == ["appName"]

    def test_invalid_sonar_flag(self):
        with pytest.raises(ValidationError):
            resolve({"appName": "foo", "appType": "springboot", "sonarEnabled": "maybe"})

    def test_registry_template_with_unknown_placeholder(self):
        with pytest.raises(ValidationError) as exc_info:
            resolve({"appName": "foo", "appType": "springboot", "registryHostTemplate": "{region}.reg"})
        assert exc_info.value.fields == ["registryHostTemplate"]

    @pytest.mark.parametrize("template", ["{environment.x}.reg", "{environment:d}.reg", "{0}.reg"])
    def test_registry_template_with_malformed_field(self, template):
        with pytest.raises(ValidationError) as exc_info:
            resolve({"appName": "foo", "appType": "springboot", "registryHostTemplate": template})
        assert exc_info.value.fields == ["registryHostTemplate"]
