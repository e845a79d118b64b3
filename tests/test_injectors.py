"""Tests for resolving installations into environment variables."""

import io

import pytest

from sonar_wrapper.exceptions import ConfigurationNotFound
from sonar_wrapper.injectors import (
    SonarEnvironment,
    extra_properties,
    maven_goal,
    resolve,
    resolve_installation,
    secret_values,
)
from sonar_wrapper.listener import BuildListener
from sonar_wrapper.models import GlobalConfig, SonarInstallation, TriggersConfig
from sonar_wrapper.types import SONAR_VARIABLES


def create_test_installation(**overrides):
    """The installation most tests run against."""
    values = dict(
        name="local",
        server_url="http://localhost:9001",
        additional_args="-X",
        triggers=TriggersConfig(),
        sonar_login="$SONAR_CONFIG_NAME",
        sonar_password="password",
        additional_properties="key=value",
    )
    values.update(overrides)
    return SonarInstallation(**values)


@pytest.fixture
def installation():
    return create_test_installation()


def test_environment(installation):
    """Test that every variable is injected next to the existing entries."""
    log = io.StringIO()
    env = SonarEnvironment(installation, BuildListener(log))

    env_map = {"key": "value"}
    env.build_env_vars(env_map)

    assert env_map["SONAR_HOST_URL"] == "http://localhost:9001"
    assert env_map["SONAR_CONFIG_NAME"] == "local"
    # variable in the value should be resolved
    assert env_map["SONAR_LOGIN"] == "local"
    assert env_map["SONAR_PASSWORD"] == "password"
    assert env_map["SONAR_JDBC_URL"] == ""
    assert env_map["SONAR_JDBC_USERNAME"] == ""
    assert env_map["SONAR_JDBC_PASSWORD"] == ""
    assert env_map["SONAR_MAVEN_GOAL"] == "sonar:sonar"
    assert env_map["SONAR_EXTRA_PROPS"] == "-Dkey=value -X"

    # existing entries still there
    assert env_map["key"] == "value"
    assert "Injecting SonarQube environment variables" in log.getvalue()


def test_environment_logs_one_line(installation):
    log = io.StringIO()
    SonarEnvironment(installation, BuildListener(log)).build_env_vars({})

    assert log.getvalue() == (
        "Injecting SonarQube environment variables using the configuration: local\n"
    )


def test_environment_mojo_version():
    """Test that a plugin version pins the fully qualified goal."""
    installation = SonarInstallation(mojo_version="2.0")

    env_map = resolve(installation, {})

    assert env_map["SONAR_MAVEN_GOAL"] == "org.codehaus.mojo:sonar-maven-plugin:2.0:sonar"


@pytest.mark.parametrize("version", [None, "", "   "])
def test_default_goal(version):
    assert maven_goal(SonarInstallation(mojo_version=version)) == "sonar:sonar"


def test_all_variables_present_for_empty_installation():
    """Test that every defined key is present even when nothing is configured."""
    env_map = resolve(SonarInstallation(), {})

    for name in SONAR_VARIABLES:
        assert name in env_map
    assert env_map["SONAR_JDBC_URL"] == ""
    assert env_map["SONAR_JDBC_USERNAME"] == ""
    assert env_map["SONAR_JDBC_PASSWORD"] == ""
    assert env_map["SONAR_CONFIG_NAME"] == ""
    assert env_map["SONAR_HOST_URL"] == "http://localhost:9000"


def test_jdbc_settings():
    installation = SonarInstallation(
        name="db",
        database_url="jdbc:h2:tcp://localhost:9092/sonar",
        database_login="dbuser",
        database_password="dbpass",
    )

    env_map = resolve(installation, {})

    assert env_map["SONAR_JDBC_URL"] == "jdbc:h2:tcp://localhost:9092/sonar"
    assert env_map["SONAR_JDBC_USERNAME"] == "dbuser"
    assert env_map["SONAR_JDBC_PASSWORD"] == "dbpass"


@pytest.mark.parametrize(
    "properties, args, expected",
    [
        (None, None, "-X"),
        ("key=value", None, "-Dkey=value -X"),
        ("key=value", "-X", "-Dkey=value -X"),
        ("a=1  b=2\n c=3", None, "-Da=1 -Db=2 -Dc=3 -X"),
        ("-Dalready=prefixed", None, "-Dalready=prefixed -X"),
        ("a=1", "-e -B", "-Da=1 -e -B -X"),
        ("key=value", "-X -e", "-Dkey=value -e -X"),
        (None, "-X -X", "-X"),
    ],
)
def test_extra_properties(properties, args, expected):
    installation = SonarInstallation(additional_properties=properties, additional_args=args)

    assert extra_properties(installation) == expected


def test_forward_reference_resolves_against_assembled_mapping():
    """Test that values may reference variables defined in the same pass."""
    installation = SonarInstallation(
        name="ci",
        server_url="http://sonar:9000",
        sonar_login="${SONAR_CONFIG_NAME}-bot",
        additional_properties="sonar.links.ci=$SONAR_HOST_URL/ci",
    )

    env_map = resolve(installation, {})

    assert env_map["SONAR_LOGIN"] == "ci-bot"
    assert env_map["SONAR_EXTRA_PROPS"] == "-Dsonar.links.ci=http://sonar:9000/ci -X"


def test_reference_to_existing_env():
    installation = SonarInstallation(name="local", sonar_password="${SECRET_FROM_CI}")

    env_map = resolve(installation, {"SECRET_FROM_CI": "s3cr3t"})

    assert env_map["SONAR_PASSWORD"] == "s3cr3t"


def test_unknown_reference_kept():
    env_map = resolve(SonarInstallation(name="local", sonar_login="$NOT_DEFINED"), {})

    assert env_map["SONAR_LOGIN"] == "$NOT_DEFINED"


def test_defined_key_overrides_host_key(installation):
    existing = {"SONAR_HOST_URL": "http://stale:9000", "PATH": "/usr/bin"}

    env_map = resolve(installation, existing)

    assert env_map["SONAR_HOST_URL"] == "http://localhost:9001"
    assert env_map["PATH"] == "/usr/bin"


def test_resolve_does_not_mutate_input(installation):
    existing = {"key": "value"}

    resolve(installation, existing)

    assert existing == {"key": "value"}


def test_resolve_is_idempotent(installation):
    existing = {"key": "value", "SONAR_CONFIG_NAME": "from-host"}

    first = resolve(installation, existing)
    second = resolve(installation, existing)

    assert first == second
    assert resolve(installation, first) == first


def test_resolve_installation_unknown_name(installation):
    """Test that an unknown name fails before the env is touched."""
    config = GlobalConfig(installations=[installation])
    existing = {"key": "value"}

    with pytest.raises(ConfigurationNotFound) as exc_info:
        resolve_installation(config, "missing", existing)

    assert "does not match any configured installation" in str(exc_info.value)
    assert exc_info.value.installation_name == "missing"
    assert exc_info.value.available == 1
    assert existing == {"key": "value"}


def test_resolve_installation_by_name(installation):
    other = create_test_installation(name="other", server_url="http://other:9000")
    config = GlobalConfig(installations=[installation, other])

    env_map = resolve_installation(config, "other", {})

    assert env_map["SONAR_HOST_URL"] == "http://other:9000"
    assert env_map["SONAR_LOGIN"] == "other"


def test_secret_values(installation):
    assert secret_values(installation) == ["password", "sonar"]


def test_secret_values_default_database_password():
    """Test that the scanner's default database password is always masked."""
    assert secret_values(SonarInstallation(name="local")) == ["sonar"]


def test_secret_values_without_installation():
    assert secret_values(None) == []


def test_secret_values_expanded_against_env():
    installation = SonarInstallation(name="local", database_password="${DB_PASS}")

    assert secret_values(installation, {"DB_PASS": "hunter2"}) == ["hunter2"]


def test_environment_secrets_follow_resolution():
    installation = SonarInstallation(name="local", sonar_password="$TOKEN")
    env = SonarEnvironment(installation, BuildListener(io.StringIO()))

    env.build_env_vars({"TOKEN": "abc123"})

    assert env.secrets == ["abc123", "sonar"]
