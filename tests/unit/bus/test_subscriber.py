"""
Unit tests for switchboard/bus/subscriber.py
"""
import pytest

from switchboard.bus.events import Message
from switchboard.bus.subscriber import FunctionSubscriber, Subscriber


class TestSubscriber:
    """Tests for the subscriber contract."""

    def test_cannot_instantiate_abstract_base(self):
        """Test that Subscriber requires both callbacks."""
        with pytest.raises(TypeError):
            Subscriber()

    def test_partial_implementation_is_abstract(self):
        """Test that implementing only deliver() is not enough."""

        class OnlyDeliver(Subscriber):
            def deliver(self, message):
                pass

        with pytest.raises(TypeError):
            OnlyDeliver()


class TestFunctionSubscriber:
    """Tests for the callable adapter."""

    def test_deliver_calls_function(self):
        """Test that deliver() forwards the message."""
        seen = []
        subscriber = FunctionSubscriber(seen.append)
        message = Message(object())

        subscriber.deliver(message)

        assert seen == [message]

    def test_shutdown_is_optional(self):
        """Test that shutdown() without a hook does nothing."""
        subscriber = FunctionSubscriber(lambda m: None)
        subscriber.shutdown()

    def test_shutdown_calls_hook(self):
        """Test that shutdown() invokes the hook."""
        calls = []
        subscriber = FunctionSubscriber(lambda m: None, on_shutdown=lambda: calls.append("down"))

        subscriber.shutdown()

        assert calls == ["down"]

    def test_name_defaults_to_function_name(self):
        """Test that the log name comes from the callback."""

        def audit_trail(message):
            pass

        assert FunctionSubscriber(audit_trail).name == "audit_trail"
        assert FunctionSubscriber(audit_trail, name="audit").name == "audit"
        assert repr(FunctionSubscriber(audit_trail)) == "FunctionSubscriber('audit_trail')"
