import logging
import unittest

from turbodom import TurboDOM, VirtualConsole
from turbodom.virtual_console import INTERNAL_ERROR


class Recorder:
    def __init__(self):
        self.calls = []

    def log(self, *args):
        self.calls.append(("log", args))

    def error(self, *args):
        self.calls.append(("error", args))


class TestVirtualConsole(unittest.TestCase):
    def test_on_emit_off(self):
        console = VirtualConsole()
        seen = []
        listener = seen.append
        console.on("info", listener)
        assert console.emit("info", "hello") is True
        console.off("info", listener)
        assert console.emit("info", "again") is False
        assert seen == ["hello"]

    def test_send_to_object(self):
        recorder = Recorder()
        console = VirtualConsole().send_to(recorder)
        console.emit("log", "a", 1)
        console.emit("warn", "ignored")
        console.emit(INTERNAL_ERROR, "boom")
        assert recorder.calls == [("log", ("a", 1)), ("error", ("boom",))]

    def test_send_to_object_without_internal_errors(self):
        recorder = Recorder()
        console = VirtualConsole().send_to(recorder, omit_internal_errors=True)
        console.emit(INTERNAL_ERROR, "boom")
        assert recorder.calls == []

    def test_send_to_logger_levels(self):
        logger = logging.getLogger("tests.virtual_console")
        console = VirtualConsole().send_to(logger)
        with self.assertLogs(logger, level="DEBUG") as logs:
            console.emit("log", "info level")
            console.emit("error", "error level")
            console.emit("debug", "debug level")
            console.emit(INTERNAL_ERROR, "internal")
        levels = [record.levelno for record in logs.records]
        assert levels == [logging.INFO, logging.ERROR, logging.DEBUG, logging.ERROR]
        assert logs.records[-1].getMessage() == "internal"


class TestWindowConsole(unittest.TestCase):
    def test_window_console_emits_on_virtual_console(self):
        console = VirtualConsole()
        seen = []
        console.on("log", lambda *args: seen.append(args))
        dom = TurboDOM(virtual_console=console)
        dom.window.console.log("hello", 42)
        assert seen == [("hello", 42)]
        assert dom.virtual_console is console

    def test_failing_load_listener_is_reported(self):
        console = VirtualConsole()
        errors = []
        console.on(INTERNAL_ERROR, errors.append)
        ran = []

        def before_parse(window):
            window.add_event_listener("load", lambda event: 1 / 0)
            window.add_event_listener("load", lambda event: ran.append(event.type))

        TurboDOM("<p>x</p>", virtual_console=console, before_parse=before_parse)
        assert len(errors) == 1
        assert isinstance(errors[0], ZeroDivisionError)
        assert ran == ["load"]


if __name__ == "__main__":
    unittest.main()
