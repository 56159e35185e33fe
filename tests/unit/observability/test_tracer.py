"""Unit tests for the composition-based tracers."""

from keyshift.observability import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)


class TestNullTracer:
    def test_span_yields_none(self) -> None:
        tracer = NullTracer()
        with tracer.span("operation", {"key": "value"}) as span:
            assert span is None

    def test_disabled(self) -> None:
        assert NullTracer().enabled is False

    def test_satisfies_protocol(self) -> None:
        assert isinstance(NullTracer(), Tracer)


class TestOpenTelemetryTracer:
    def test_enabled(self) -> None:
        assert OpenTelemetryTracer(__name__).enabled is True

    def test_span_yields_span(self) -> None:
        tracer = OpenTelemetryTracer(__name__)
        with tracer.span("keyshift.test", {"keyshift.key": "k"}) as span:
            assert span is not None
            span.set_attribute("keyshift.extra", 1)

    def test_satisfies_protocol(self) -> None:
        assert isinstance(OpenTelemetryTracer(__name__), Tracer)


class TestMockTracer:
    def test_records_spans(self) -> None:
        tracer = MockTracer()
        with tracer.span("a", {"x": 1}):
            with tracer.span("b"):
                pass

        assert tracer.spans == [("a", {"x": 1}), ("b", None)]
        assert tracer.span_names == ["a", "b"]

    def test_clear(self) -> None:
        tracer = MockTracer()
        with tracer.span("a"):
            pass
        tracer.clear()
        assert tracer.spans == []


class TestCreateTracer:
    def test_enabled_returns_opentelemetry_tracer(self) -> None:
        assert isinstance(create_tracer(__name__, enable_tracing=True), OpenTelemetryTracer)

    def test_disabled_returns_null_tracer(self) -> None:
        assert isinstance(create_tracer(__name__, enable_tracing=False), NullTracer)
