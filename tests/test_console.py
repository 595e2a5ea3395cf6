import datetime
import socket

import clearcache.display.console as console
import pytest
from clearcache.model.windows import ContentKind, WindowRecord


@pytest.fixture
def listener():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen()
    server.settimeout(2)
    host, port = console.HOST, console.PORT
    console.configure("127.0.0.1", server.getsockname()[1], enabled=True)
    yield server
    console.configure(host, port, enabled=False)
    server.close()


def received(server: socket.socket) -> list[tuple[str, str]]:
    conn, _ = server.accept()
    with conn, conn.makefile("r", encoding="utf-8") as stream:
        return [console.decode(line) for line in stream]


def test_lines_are_tagged_with_their_source():
    assert console.encode("hello", "stdout") == b"stdout\thello\n"
    assert console.encode("one\ntwo\n", "app") == b"app\tone\napp\ttwo\n"
    assert console.decode("window:w1\topened\n") == ("window:w1", "opened")
    assert console.decode("untagged") == ("?", "untagged")


def test_format_line():
    now = datetime.datetime(2025, 3, 5, 9, 7, 3)
    assert console.format_line("app", "ready", now) == "[09:07:03] app          ready"


def test_log_sends_to_the_server(listener):
    console.log("saved ", 3, " entries", source="stdout")
    assert received(listener) == [("stdout", "saved 3 entries")]


def test_window_events_carry_the_window_id(listener):
    record = WindowRecord.create(ContentKind.DETAIL, 4, entry_id="e9")
    console.window_event(record, "opened")
    [(source, message)] = received(listener)
    assert source == f"window:{record.id}"
    assert message.startswith("opened detail")
    assert "z=4" in message
    assert message.endswith("entry=e9")


def test_writer_tags_stderr(listener):
    writer = console.ConsoleWriter("stderr")
    assert writer.write("boom\n") == 5
    assert received(listener) == [("stderr", "boom")]


def test_disabled_console_sends_nothing(listener):
    console.configure(console.HOST, console.PORT, enabled=False)
    console.log("quiet")
    listener.settimeout(0.2)
    with pytest.raises(socket.timeout):
        listener.accept()
