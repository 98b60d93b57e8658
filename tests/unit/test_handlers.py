"""Tests for handler bundles."""

import pytest

from context_protocol import Context, FunctionHandlers, Protocol, ProtocolHandlers, protocol_key


class Minimal(ProtocolHandlers):
    def validate_context(self, context):
        return True

    async def process_context(self, context):
        return context.data


class WithTransform(Minimal):
    def transform_output(self, output):
        return [output]


class TestProtocolHandlers:
    """Test the ProtocolHandlers interface."""

    def test_cannot_instantiate_without_required_methods(self):
        class MissingProcess(ProtocolHandlers):
            def validate_context(self, context):
                return True

        with pytest.raises(TypeError):
            MissingProcess()

    def test_default_transform_is_identity(self):
        handlers = Minimal()

        assert handlers.has_transform is False
        assert handlers.transform_output("x") == "x"

    def test_override_marks_transform_present(self):
        handlers = WithTransform()

        assert handlers.has_transform is True
        assert handlers.transform_output("x") == ["x"]


class TestFunctionHandlers:
    """Test FunctionHandlers."""

    def test_has_transform_follows_callable(self):
        assert FunctionHandlers(validate=bool, process=bool).has_transform is False
        assert FunctionHandlers(validate=bool, process=bool, transform=str).has_transform is True

    @pytest.mark.asyncio
    async def test_awaits_coroutine_functions(self):
        async def process(ctx):
            return ctx.id

        handlers = FunctionHandlers(validate=lambda ctx: True, process=process)

        assert await handlers.process_context(Context(id="c9", type="t")) == "c9"

    @pytest.mark.asyncio
    async def test_accepts_plain_return_values(self):
        handlers = FunctionHandlers(validate=lambda ctx: True, process=lambda ctx: ctx.type)

        assert await handlers.process_context(Context(id="c9", type="t")) == "t"

    def test_validate_delegates(self):
        handlers = FunctionHandlers(validate=lambda ctx: ctx.type == "json", process=lambda ctx: None)

        assert handlers.validate_context(Context(id="a", type="json")) is True
        assert handlers.validate_context(Context(id="a", type="text")) is False


class TestModels:
    """Test Context and Protocol records."""

    def test_protocol_key(self):
        assert protocol_key("summarize", "1.0") == "summarize@1.0"
        assert Protocol(name="summarize", version="1.0", handlers=Minimal()).key == "summarize@1.0"

    def test_context_defaults(self):
        context = Context(id="c1", type="text")

        assert context.data is None
        assert context.metadata is None
