"""Unit tests for domain exceptions."""

import pytest

from miraveja_glue.application import AssemblingContainer
from miraveja_glue.domain import DefinitionContext, FrameKind, RunningContext
from miraveja_glue.domain.exceptions import (
    AggregatedError,
    AliasNotFoundError,
    AssemblyError,
    CircularDependencyError,
    DeserialiseError,
    DIException,
    ParameterNotFoundError,
    SerialiseError,
    ServiceNotFoundError,
    UnknownServiceTypeError,
)
from miraveja_glue.domain.models import Frame


@pytest.fixture
def definition_context():
    return DefinitionContext(path="/app/services.yaml", id="mailer", definition="symbol: (smtplib)SMTP\n")


class TestDIException:
    """Test cases for the base DIException class."""

    def test_di_exception_is_exception(self):
        """Test that DIException inherits from Exception."""
        assert issubclass(DIException, Exception)

    def test_di_exception_can_be_raised(self):
        """Test that DIException can be raised with a message."""
        with pytest.raises(DIException, match="Test error"):
            raise DIException("Test error")

    def test_di_exception_without_context(self):
        """Test that the message is kept as is without a context."""
        error = DIException("Test error message")
        assert str(error) == "Test error message"
        assert error.context is None

    def test_di_exception_with_context(self, definition_context):
        """Test that the definition provenance is appended to the message."""
        error = DIException("Broken", definition_context)

        message = str(error)
        assert message.startswith("Broken\n\n")
        assert "`mailer` defined in `/app/services.yaml`" in message
        assert "symbol: (smtplib)SMTP" in message
        assert error.context is definition_context

    @pytest.mark.parametrize(
        "error_class",
        [
            AggregatedError,
            AliasNotFoundError,
            AssemblyError,
            CircularDependencyError,
            DeserialiseError,
            ParameterNotFoundError,
            SerialiseError,
            ServiceNotFoundError,
            UnknownServiceTypeError,
        ],
    )
    def test_all_errors_inherit_from_di_exception(self, error_class):
        """Test that every framework error is a DIException."""
        assert issubclass(error_class, DIException)


class TestCircularDependencyError:
    """Test cases for the CircularDependencyError class."""

    def test_circular_dependency_error_renders_chain(self):
        """Test that the message lists every frame of the chain."""
        chain = [
            Frame(kind=FrameKind.SERVICE, id="a"),
            Frame(kind=FrameKind.SERVICE, id="b"),
            Frame(kind=FrameKind.SERVICE, id="a"),
        ]
        error = CircularDependencyError(chain)

        assert error.dependency_chain == chain
        assert "Circular dependency detected: service(a) -> service(b) -> service(a)" in str(error)

    def test_circular_dependency_error_with_mixed_kinds(self):
        """Test chains mixing parameters and services."""
        chain = [
            Frame(kind=FrameKind.SERVICE, id="client"),
            Frame(kind=FrameKind.PARAMETER, id="url"),
            Frame(kind=FrameKind.PARAMETER, id="url"),
        ]
        error = CircularDependencyError(chain)

        assert "service(client) -> parameter(url) -> parameter(url)" in str(error)


class TestNotFoundErrors:
    """Test cases for the not found errors."""

    def test_service_not_found_without_context(self):
        """Test the message of a missing service."""
        error = ServiceNotFoundError("mailer")

        assert error.service_id == "mailer"
        assert str(error) == "Service definition `mailer` was not found."

    def test_service_not_found_with_chain(self):
        """Test that the chain of requests is included when available."""
        container = AssemblingContainer({}, {}, {})
        context = RunningContext(container=container).push_service_frame("app").push_service_frame("mailer")

        error = ServiceNotFoundError("mailer", context)

        assert "Chain of requests:\nservice(app) -> service(mailer)" in str(error)

    def test_service_not_found_with_empty_chain(self):
        """Test that an empty chain is not rendered."""
        container = AssemblingContainer({}, {}, {})
        error = ServiceNotFoundError("mailer", RunningContext(container=container))

        assert "Chain of requests" not in str(error)

    def test_parameter_not_found(self):
        """Test the message of a missing parameter."""
        container = AssemblingContainer({}, {}, {})
        context = RunningContext(container=container).push_parameter_frame("port")

        error = ParameterNotFoundError("port", context)

        assert error.parameter_id == "port"
        assert "Parameter definition `port` was not found." in str(error)
        assert "parameter(port)" in str(error)

    def test_alias_not_found(self):
        """Test the message of a missing alias."""
        error = AliasNotFoundError("logger")

        assert error.alias_id == "logger"
        assert "Alias definition `logger` was not found." in str(error)


class TestOtherErrors:
    """Test cases for the remaining errors."""

    def test_unknown_service_type_error(self, definition_context):
        """Test that the ambiguous service error carries its definition."""
        error = UnknownServiceTypeError(definition_context)

        assert "Unable to determine service type." in str(error)
        assert error.context is definition_context

    def test_serialise_errors(self):
        """Test the messages of the format errors."""
        assert str(SerialiseError("YAML", "/a.yaml")) == "Unable to serialise YAML data in /a.yaml"
        assert str(DeserialiseError("JSON", "/a.json")) == "Unable to deserialise JSON data in /a.json"

    def test_aggregated_error_indents_messages(self):
        """Test that every underlying message is indented."""
        errors = [ServiceNotFoundError("a"), DIException("first line\nsecond line")]
        error = AggregatedError(errors)

        message = str(error)
        assert error.errors == errors
        assert message.startswith("This is an aggregated error triggered by the following ones:")
        assert "  Service definition `a` was not found." in message
        assert "  first line\n  second line" in message

    def test_assembly_error_wraps_original(self, definition_context):
        """Test that the original exception and the provenance are kept."""
        original = ZeroDivisionError("division by zero")
        error = AssemblyError(original, definition_context)

        assert error.original is original
        assert "ZeroDivisionError: division by zero" in str(error)
        assert "`mailer` defined in `/app/services.yaml`" in str(error)
