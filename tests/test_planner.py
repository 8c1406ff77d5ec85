"""Tests for release planning."""

import pytest

from pipeline_cli.exceptions import ValidationError
from pipeline_cli.models import ApplicationType
from pipeline_cli.planner import plan
from pipeline_cli.resolver import resolve


def test_image_reference_format(springboot_config):
    release = plan(springboot_config, 42)

    assert release.registry_host == "stg-docker-reg.mobitel.lk"
    assert release.image_reference == "stg-docker-reg.mobitel.lk/mobitel_pipeline/foo:stg.42"
    assert release.exposed_port == 8080


def test_plan_is_deterministic(springboot_config):
    assert plan(springboot_config, 7) == plan(springboot_config, 7)


def test_registry_template_and_environment():
    config = resolve({
        "appName": "foo",
        "appType": "react-nginx",
        "environment": "prd",
        "project": "web",
        "registryHostTemplate": "registry.{environment}.example.com",
    })

    assert plan(config, 3).image_reference == "registry.prd.example.com/web/foo:prd.3"


@pytest.mark.parametrize("app_type, compiled, artifact", [
    ("springboot", True, "target/*.jar"),
    ("tomcat-war", True, "target/*.war"),
    ("angular-nginx", False, None),
    ("react-nginx", False, None),
    ("react-normal", False, None),
])
def test_compile_step_by_type(app_type, compiled, artifact):
    release = plan(resolve({"appName": "foo", "appType": app_type}), 1)

    assert release.requires_compile_step is compiled
    assert release.artifact_glob == artifact
    assert ApplicationType(app_type).requires_compile_step is compiled


def test_explicit_port_carried_into_plan(nginx_config):
    assert plan(nginx_config, 1).exposed_port == 8081


@pytest.mark.parametrize("build_id", [-1, "abc", None, 3.7, "3.7"])
def test_invalid_build_id(springboot_config, build_id):
    with pytest.raises(ValidationError):
        plan(springboot_config, build_id)


def test_whole_float_build_id(springboot_config):
    assert plan(springboot_config, 7.0).image_reference.endswith("foo:stg.7")
