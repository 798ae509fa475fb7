"""Stub MCP servers for probe tests, run with the current interpreter."""

import sys
import textwrap

import pytest

from toolentry_cli.probe import ServerLaunchSpec

ECHO_SERVER = """
import json, sys
print("stub server starting", flush=True)
request = json.loads(sys.stdin.readline())
reply = {"jsonrpc": "2.0", "id": request["id"], "result": {"tools": []}}
sys.stdout.write(json.dumps(reply) + "\\n")
sys.stdout.flush()
sys.stdin.read()
"""

SILENT_SERVER = """
import sys
sys.stdin.read()
"""

SLEEPING_SERVER = """
import time
time.sleep(60)
"""

CRASHING_SERVER = """
import sys
sys.stderr.write("boom: missing configuration\\n")
sys.exit(1)
"""

HELLO_SCRIPT = """
print("hello from stub")
"""

EXIT_AFTER_REPLY_SERVER = """
import json, os, sys
request = json.loads(sys.stdin.readline())
reply = {"jsonrpc": "2.0", "id": request["id"], "result": {"tools": []}}
sys.stdout.write(json.dumps(reply) + "\\n")
sys.stdout.flush()
os._exit(0)
"""

STUBBORN_SERVER = """
import signal, time
signal.signal(signal.SIGTERM, signal.SIG_IGN)
time.sleep(60)
"""

CHATTY_SERVER = """
import sys
while True:
    sys.stdout.write("x" * 65536)
    sys.stdout.flush()
"""


def python_spec(source: str, env=None) -> ServerLaunchSpec:
    return ServerLaunchSpec(
        command=sys.executable,
        args=("-c", textwrap.dedent(source)),
        env=env,
    )


@pytest.fixture
def echo_server():
    return python_spec(ECHO_SERVER)


@pytest.fixture
def silent_server():
    return python_spec(SILENT_SERVER)


@pytest.fixture
def sleeping_server():
    return python_spec(SLEEPING_SERVER)


@pytest.fixture
def crashing_server():
    return python_spec(CRASHING_SERVER)


@pytest.fixture
def hello_script():
    return python_spec(HELLO_SCRIPT)


@pytest.fixture
def missing_command():
    return ServerLaunchSpec(command="toolentry-no-such-command-xyz", args=())


@pytest.fixture
def exit_after_reply_server():
    return python_spec(EXIT_AFTER_REPLY_SERVER)


@pytest.fixture
def stubborn_server():
    return python_spec(STUBBORN_SERVER)


@pytest.fixture
def chatty_server():
    return python_spec(CHATTY_SERVER)
