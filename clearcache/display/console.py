"""  simple client/server logger for debugging

Every line carries a source tag: `app`, `stdout`, `stderr` or `window:<id>`.
Run the server with `python -m clearcache.display.console [--port N] [--source window]`,
then start the app with `--console` to mirror print() output and window
lifecycle into it.
"""

import argparse
import datetime
import socket
import sys
import threading

HOST = "127.0.0.1"
PORT = 50505
ENABLED = False

# ──────────────────────────────
# CLIENT LOGGER
# ──────────────────────────────


def configure(host: str = HOST, port: int = PORT, enabled: bool = True) -> None:
    global HOST, PORT, ENABLED
    HOST, PORT, ENABLED = host, port, enabled


def encode(message: str, source: str = "app") -> bytes:
    lines = message.rstrip("\n").splitlines() or [""]
    return "".join(f"{source}\t{line}\n" for line in lines).encode("utf-8")


def decode(line: str) -> tuple[str, str]:
    source, sep, message = line.rstrip("\n").partition("\t")
    if not sep:
        return "?", source
    return source, message


def log(*args: list[str] | str, source: str = "app") -> None:
    if not ENABLED:
        return
    message = "".join(str(arg) for arg in args)
    try:
        with socket.create_connection((HOST, PORT), timeout=0.5) as sock:
            sock.sendall(encode(message, source))
    except OSError:
        pass  # server not running


def window_event(record, what: str) -> None:
    """One line per window lifecycle step, tagged with the window id."""
    entry = f" entry={record.associated_entry_id}" if record.associated_entry_id else ""
    log(f"{what} {record.content_kind.value} {record.title!r} z={record.z_order}{entry}", source=f"window:{record.id}")


# redirect print() to console.log()
class ConsoleWriter:
    def __init__(self, source: str = "stdout"):
        self.source = source

    def write(self, text):
        if text.strip():
            log(text, source=self.source)
        return len(text)

    def flush(self):
        pass

    def isatty(self):
        return False


def redirect_stdout() -> None:
    sys.stdout = ConsoleWriter("stdout")
    sys.stderr = ConsoleWriter("stderr")


# ──────────────────────────────
# SERVER FUNCTION
# ──────────────────────────────

def format_line(source: str, message: str, now: datetime.datetime) -> str:
    return f"[{now:%H:%M:%S}] {source:<12} {message}"


def _handle_client(conn, addr, only: str | None):
    with conn, conn.makefile("r", encoding="utf-8", errors="replace") as stream:
        for line in stream:
            source, message = decode(line)
            if only and not source.startswith(only):
                continue
            print(format_line(source, message, datetime.datetime.now()))


def run_server(host: str = HOST, port: int = PORT, only: str | None = None):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server.bind((host, port))
        server.listen()
        print(f"Console server running on {host}:{port}" + (f", showing {only}*" if only else ""))
        while True:
            conn, addr = server.accept()
            threading.Thread(target=_handle_client, args=(conn, addr, only), daemon=True).start()


# ──────────────────────────────
# MAIN ENTRYPOINT
# ──────────────────────────────

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="clear cache debug console")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--source", help="only show lines whose source starts with this, e.g. window")
    args = parser.parse_args()
    run_server(args.host, args.port, args.source)
